"""Performance metrics collection script."""

from __future__ import annotations

from dataclasses import dataclass, field

from webviewbridge.tasks import render


@dataclass(slots=True)
class ResourceFilter:
    resource_type: list[str] = field(default_factory=list)
    min_duration_ms: float | None = None
    max_duration_ms: float | None = None
    url_pattern: str | None = None


_TEMPLATE = r"""(async () => {
    try {
        const OPTIONS = /*%options%*/;
        const metrics = {};
        const errors = [];
        function entries(kind) {
            try {
                return (typeof performance !== 'undefined' && performance.getEntriesByType)
                    ? performance.getEntriesByType(kind) : [];
            } catch (e) {
                errors.push('entries ' + kind + ': ' + e.message);
                return [];
            }
        }
        if (OPTIONS.navigation) {
            try {
                const nav = entries('navigation')[0];
                const paint = entries('paint').find(p => p.name === 'first-paint');
                if (nav) {
                    metrics.navigation_timing = {
                        dns_lookup_ms: nav.domainLookupEnd - nav.domainLookupStart,
                        tcp_connection_ms: nav.connectEnd - nav.connectStart,
                        request_time_ms: nav.responseStart - nav.requestStart,
                        response_time_ms: nav.responseEnd - nav.responseStart,
                        dom_interactive_ms: nav.domInteractive,
                        dom_complete_ms: nav.domComplete,
                        page_load_ms: nav.loadEventEnd,
                        redirect_ms: nav.redirectEnd - nav.redirectStart,
                        transfer_size: nav.transferSize || 0,
                        first_paint_ms: paint ? paint.startTime : null
                    };
                }
            } catch (e) {
                errors.push('navigation: ' + e.message);
            }
        }
        if (OPTIONS.resources) {
            try {
                const filter = OPTIONS.resource_filter || {};
                const types = filter.resource_type || [];
                const minMs = filter.min_duration_ms == null ? 0 : filter.min_duration_ms;
                const maxMs = filter.max_duration_ms == null ? Infinity : filter.max_duration_ms;
                const urlRe = filter.url_pattern ? new RegExp(filter.url_pattern, 'i') : null;
                const byType = {};
                const all = [];
                for (const r of entries('resource')) {
                    const kind = r.initiatorType || 'other';
                    const duration = r.responseEnd - r.startTime;
                    if (types.length && !types.includes(kind)) continue;
                    if (duration < minMs || duration > maxMs) continue;
                    if (urlRe && !urlRe.test(r.name)) continue;
                    const row = {
                        name: r.name,
                        type: kind,
                        start_time_ms: r.startTime,
                        duration_ms: duration,
                        transfer_size: r.transferSize || 0,
                        decoded_body_size: r.decodedBodySize || 0,
                        cache_behavior: (r.transferSize === 0 && r.decodedBodySize > 0) ? 'cached' : 'network'
                    };
                    (byType[kind] = byType[kind] || []).push(row);
                    all.push(row);
                }
                metrics.resource_timing = {
                    by_type: byType,
                    summary: {
                        total_resources: all.length,
                        total_duration_ms: all.reduce((sum, r) => sum + r.duration_ms, 0),
                        largest_transfer_size_bytes: Math.max(0, ...all.map(r => r.transfer_size)),
                        cached_resources: all.filter(r => r.cache_behavior === 'cached').length
                    },
                    resources: all.slice(0, 100)
                };
            } catch (e) {
                errors.push('resources: ' + e.message);
            }
        }
        if (OPTIONS.user_timing) {
            try {
                const pick = e => ({ name: e.name, start_time_ms: e.startTime, duration_ms: e.duration, detail: e.detail || null });
                metrics.user_timing = {
                    marks: entries('mark').slice(0, 100).map(pick),
                    measures: entries('measure').slice(0, 100).map(pick)
                };
            } catch (e) {
                errors.push('user timing: ' + e.message);
            }
        }
        if (OPTIONS.memory) {
            const memory = typeof performance !== 'undefined' ? performance.memory : undefined;
            metrics.memory_usage = memory ? {
                js_heap_size_limit_bytes: memory.jsHeapSizeLimit,
                total_js_heap_size_bytes: memory.totalJSHeapSize,
                used_js_heap_size_bytes: memory.usedJSHeapSize,
                heap_usage_percent: Number((memory.usedJSHeapSize / memory.jsHeapSizeLimit * 100).toFixed(2))
            } : { available: false, reason: 'performance.memory API not available' };
        }
        if (OPTIONS.long_tasks) {
            metrics.long_tasks = entries('longtask').filter(t => t.duration > 50).slice(0, 100).map(t => ({
                name: t.name, start_time_ms: t.startTime, duration_ms: t.duration
            }));
        }
        metrics.errors = errors;
        metrics.collected_at_ms = Date.now();
        return JSON.stringify(metrics);
    } catch (e) {
        return JSON.stringify({ error: 'performance collection failed: ' + e.message });
    }
})()"""


def build_performance_script(
    *,
    include_navigation: bool = True,
    include_resources: bool = True,
    include_user_timing: bool = True,
    include_memory: bool = True,
    include_long_tasks: bool = False,
    resource_filter: ResourceFilter | None = None,
) -> str:
    rf = resource_filter
    options = {
        "navigation": include_navigation,
        "resources": include_resources,
        "user_timing": include_user_timing,
        "memory": include_memory,
        "long_tasks": include_long_tasks,
        "resource_filter": None if rf is None else {
            "resource_type": list(rf.resource_type),
            "min_duration_ms": rf.min_duration_ms,
            "max_duration_ms": rf.max_duration_ms,
            "url_pattern": rf.url_pattern,
        },
    }
    return render(_TEMPLATE, options=options)
