"""Snapshot of well-known state containers in the page."""

from __future__ import annotations

from webviewbridge.tasks import SAFE_SERIALIZE_JS, render

LIBRARIES_CHECKED = ["zustand", "redux", "pinia", "vue2", "recoil", "mobx"]
MAX_SIZE = 1_000_000

_TEMPLATE = r"""(async () => {
    try {
        const MAX_DEPTH = /*%max_depth%*/;
        const MAX_KEYS = 100;
        const MAX_SIZE = /*%max_size%*/;
        const PATH = /*%path%*/;
        const errors = [];
        const libraries = [];
        const flags = { max_depth_reached: false, truncated: false };
""" + SAFE_SERIALIZE_JS + r"""
        const result = {};
        function grab(name, probe) {
            try {
                const value = probe();
                if (value === undefined) return;
                libraries.push(name);
                result[name] = value;
            } catch (e) {
                errors.push(name + ': ' + e.message);
            }
        }
        grab('zustand', () => {
            if (!window.__zustand_state) return undefined;
            const out = {};
            for (const key of Object.keys(window.__zustand_state)) {
                const store = window.__zustand_state[key];
                if (store && typeof store.getState === 'function') out[key] = safeSerialize(store.getState(), 0);
            }
            return out;
        });
        grab('redux', () => {
            const store = window.__store || window.__REDUX_STORE__;
            return store && typeof store.getState === 'function' ? safeSerialize(store.getState(), 0) : undefined;
        });
        grab('pinia', () => {
            const pinia = window.__PINIA__;
            if (!pinia || !pinia._s) return undefined;
            const out = {};
            for (const [key, store] of pinia._s) out[key] = safeSerialize(store.$state, 0);
            return out;
        });
        grab('vue2', () => {
            const hook = window.__VUE_DEVTOOLS_GLOBAL_HOOK__;
            const vm = hook && hook.currentInstance;
            return vm && vm.$data ? safeSerialize(vm.$data, 0) : undefined;
        });
        grab('recoil', () => window.__RECOIL_INTERNAL_SNAPSHOT__
            ? safeSerialize(window.__RECOIL_INTERNAL_SNAPSHOT__, 0) : undefined);
        grab('mobx', () => window.__mobxGlobalState ? safeSerialize(window.__mobxGlobalState, 0) : undefined);
        let state = result;
        if (PATH) {
            let current = result;
            for (const part of PATH.split('.')) {
                if (current == null) break;
                current = current[part];
            }
            state = {};
            state[PATH] = current === undefined ? null : current;
        }
        return JSON.stringify({
            state: state,
            detected_libraries: libraries,
            metadata: {
                truncated: flags.truncated,
                max_depth_reached: flags.max_depth_reached,
                libraries_checked: /*%libraries_checked%*/,
                serialization_errors: errors
            }
        });
    } catch (e) {
        return JSON.stringify({ error: 'state dump failed: ' + e.message });
    }
})()"""


def build_state_dump_script(*, max_depth: int = 10, path: str | None = None) -> str:
    return render(
        _TEMPLATE,
        max_depth=max_depth,
        max_size=MAX_SIZE,
        path=path or "",
        libraries_checked=LIBRARIES_CHECKED,
    )
