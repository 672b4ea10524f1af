"""Script bodies published to webviews over the ``execute-js`` topic.

Each generator returns a self-contained async IIFE that resolves to a JSON
string. Parameters are spliced in as JSON literals, never as raw text.
"""

from __future__ import annotations

import json
import re
from typing import Any


_MARKER = re.compile(r"/\*%(\w+)%\*/")


def render(template: str, **values: Any) -> str:
    """Replace ``/*%name%*/`` markers in ``template`` with JSON literals.

    Substitution is a single pass, so marker text inside a value stays literal.
    """
    return _MARKER.sub(lambda m: json.dumps(values[m.group(1)]), template)


# Shared cycle-safe serializer. Requires MAX_DEPTH, MAX_KEYS and MAX_SIZE to be
# declared before it, plus an ``errors`` array and a ``flags`` object.
SAFE_SERIALIZE_JS = r"""
        const seen = new WeakSet();
        let currentSize = 0;
        function safeSerialize(value, depth) {
            if (depth > MAX_DEPTH) { flags.max_depth_reached = true; return '[Max depth reached]'; }
            if (value === null || value === undefined) return null;
            const type = typeof value;
            if (type === 'function') return '[Function]';
            if (type === 'symbol') return '[Symbol]';
            if (type === 'bigint') return value.toString();
            if (type === 'string') {
                if (currentSize > MAX_SIZE) { flags.truncated = true; return '[Size limit exceeded]'; }
                const text = value.length > 1000 ? value.substring(0, 1000) + '[... truncated]' : value;
                currentSize += text.length + 2;
                return text;
            }
            if (type !== 'object') return value;
            if (seen.has(value)) return '[Circular Reference]';
            seen.add(value);
            if (currentSize > MAX_SIZE) { flags.truncated = true; return '[Size limit exceeded]'; }
            currentSize += 16;
            if (value instanceof Date) return value.toISOString();
            if (value instanceof RegExp) return { source: value.source, flags: value.flags };
            if (Array.isArray(value) || value instanceof Set) {
                const items = Array.from(value);
                const out = items.slice(0, MAX_KEYS).map(item => safeSerialize(item, depth + 1));
                if (items.length > MAX_KEYS) { flags.truncated = true; out.push('[... ' + (items.length - MAX_KEYS) + ' more items]'); }
                return out;
            }
            if (value instanceof Map) {
                const out = {};
                let count = 0;
                for (const [k, v] of value) {
                    if (count++ >= MAX_KEYS) { flags.truncated = true; out['[... more entries]'] = '[Truncated]'; break; }
                    out[String(k)] = safeSerialize(v, depth + 1);
                }
                return out;
            }
            if (value.constructor === Object || value.constructor === undefined) {
                const out = {};
                const keys = Object.keys(value);
                for (const key of keys.slice(0, MAX_KEYS)) {
                    try {
                        out[key] = safeSerialize(value[key], depth + 1);
                    } catch (e) {
                        out[key] = '[Error: ' + e.message + ']';
                    }
                }
                if (keys.length > MAX_KEYS) { flags.truncated = true; out['[... more keys]'] = '[Truncated]'; }
                return out;
            }
            return '[Object ' + ((value.constructor && value.constructor.name) || 'Unknown') + ']';
        }
"""
