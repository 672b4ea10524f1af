"""Component tree walk over React / Vue devtools hooks."""

from __future__ import annotations

from webviewbridge.tasks import SAFE_SERIALIZE_JS, render

MAX_COMPONENTS = 500

_TEMPLATE = r"""(async () => {
    try {
        const MAX_DEPTH = /*%max_depth%*/;
        const MAX_KEYS = 50;
        const MAX_SIZE = 1000000;
        const MAX_COMPONENTS = /*%max_components%*/;
        const FILTER = /*%component_filter%*/;
        const errors = [];
        const flags = { max_depth_reached: false, truncated: false };
        let componentCount = 0;
""" + SAFE_SERIALIZE_JS + r"""
        const visited = new WeakSet();
        const reactHook = window.__REACT_DEVTOOLS_GLOBAL_HOOK__;
        const vueHook = window.__VUE_DEVTOOLS_GLOBAL_HOOK__;
        const framework = {
            framework_type: reactHook && vueHook ? 'both' : reactHook ? 'react' : vueHook ? 'vue' : 'none',
            react_version: (window.React && window.React.version) || null,
            vue_version: (window.__VUE__ && window.__VUE__.version) || null
        };
        const HOOK_NAMES = ['useState', 'useReducer', 'useContext', 'useEffect', 'useLayoutEffect',
            'useInsertionEffect', 'useRef', 'useImperativeHandle', 'useCallback', 'useMemo'];
        function describe(name, id, depth, props, state) {
            const info = { name: name || 'Anonymous', id: String(id), depth: depth };
            if (props !== undefined) info.props = safeSerialize(props, 1);
            if (state !== undefined) info.state = safeSerialize(state, 1);
            return info;
        }
        function admit(name) {
            if (componentCount >= MAX_COMPONENTS) { flags.truncated = true; return false; }
            if (FILTER && !(name || '').includes(FILTER)) return false;
            componentCount++;
            return true;
        }
        function walkFiber(fiber, depth, out) {
            while (fiber) {
                if (visited.has(fiber)) return;
                visited.add(fiber);
                if (depth > MAX_DEPTH) { flags.max_depth_reached = true; return; }
                if (componentCount >= MAX_COMPONENTS) { flags.truncated = true; return; }
                let next = out;
                if (typeof fiber.elementType === 'function') {
                    const name = fiber.elementType.displayName || fiber.elementType.name;
                    if (admit(name)) {
                        const info = describe(name, fiber.key || componentCount, depth, fiber.memoizedProps,
                            fiber.stateNode && fiber.stateNode.state ? fiber.stateNode.state : undefined);
                        const hooks = [];
                        let hook = fiber.memoizedState;
                        while (hook && typeof hook === 'object' && 'next' in hook && hooks.length < 20) {
                            hooks.push({ hook_name: HOOK_NAMES[hooks.length] || 'useCustom_' + hooks.length,
                                hook_value: safeSerialize(hook.memoizedState, 2) });
                            hook = hook.next;
                        }
                        if (hooks.length) info.hooks = hooks;
                        info.children = [];
                        out.push(info);
                        next = info.children;
                    }
                }
                try {
                    walkFiber(fiber.child, depth + 1, next);
                } catch (e) {
                    errors.push('react walk: ' + e.message);
                }
                fiber = fiber.sibling;
            }
        }
        function walkVue(instance, depth, out) {
            if (!instance || visited.has(instance)) return;
            visited.add(instance);
            if (depth > MAX_DEPTH) { flags.max_depth_reached = true; return; }
            const type = instance.type || instance.$options || {};
            const name = type.name || type.__name;
            let next = out;
            if (admit(name)) {
                const info = describe(name, instance.uid, depth, instance.props || instance.$props,
                    instance.setupState || instance.$data);
                info.children = [];
                out.push(info);
                next = info.children;
            }
            const sub = instance.subTree;
            const kids = instance.$children
                || (sub && Array.isArray(sub.children) ? sub.children.map(c => c && c.component).filter(Boolean) : [])
                || [];
            if (sub && sub.component) kids.push(sub.component);
            for (const child of kids) walkVue(child, depth + 1, next);
        }
        const components = [];
        if (reactHook && reactHook.renderers) {
            try {
                for (const rendererId of reactHook.renderers.keys()) {
                    const roots = reactHook.getFiberRoots ? reactHook.getFiberRoots(rendererId) : new Set();
                    for (const root of roots) walkFiber(root.current, 0, components);
                }
            } catch (e) {
                errors.push('react: ' + e.message);
            }
        }
        if (vueHook) {
            try {
                for (const app of (vueHook.apps || [])) {
                    walkVue(app._instance || (app._container && app._container._vnode && app._container._vnode.component), 0, components);
                }
            } catch (e) {
                errors.push('vue: ' + e.message);
            }
        }
        return JSON.stringify({
            framework: framework,
            components: components,
            metadata: {
                max_depth_reached: flags.max_depth_reached,
                total_components: componentCount,
                truncated: flags.truncated,
                errors: errors
            }
        });
    } catch (e) {
        return JSON.stringify({ error: 'devtools bridge failed: ' + e.message });
    }
})()"""


def build_devtools_script(*, max_depth: int = 10, component_filter: str | None = None) -> str:
    return render(
        _TEMPLATE,
        max_depth=max_depth,
        max_components=MAX_COMPONENTS,
        component_filter=component_filter or "",
    )
