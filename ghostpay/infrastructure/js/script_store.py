"""
JavaScript 脚本存储模块 - 基础设施层实现

将所有在页面中执行的 JavaScript 代码集中管理。

模块结构:
- 元素级脚本（this 绑定到目标元素，参数通过 arguments 传入）
- TEXT_MATCHES: 按文本找可点击元素（最内层命中）
- NAVIGATION_SHIM: window.open 垫片 + 消息发件箱（新文档初始化脚本）
- OUTBOX_DRAIN: 宿主取走发件箱里的消息
- ghost_engine.js: 注入模式的完整引擎模板（外部文件）
"""

from typing import Final, Optional
from pathlib import Path


# 缓存外部 JS 文件内容
_ghost_engine_js_cache: Optional[str] = None

# 模板中的占位符，由 script_builder 替换为 JSON 参数
PAYLOAD_PLACEHOLDER: Final[str] = '__GHOSTPAY_PAYLOAD__'


class ScriptStore:
    """
    JavaScript 脚本存储

    集中管理所有 JavaScript 脚本，提供类型安全的访问方式。
    """

    # ============================================================
    # 注入模式引擎模板（从外部文件加载）
    # ============================================================
    @staticmethod
    def get_ghost_engine_js() -> str:
        """
        加载引擎模板

        使用缓存避免重复读取文件。
        """
        global _ghost_engine_js_cache

        if _ghost_engine_js_cache is not None:
            return _ghost_engine_js_cache

        js_path = Path(__file__).parent / "ghost_engine.js"
        _ghost_engine_js_cache = js_path.read_text(encoding="utf-8")
        return _ghost_engine_js_cache

    # ============================================================
    # 元素级脚本
    # ============================================================

    # arguments[0] = 新值；走原生 setter，React 受控组件才认
    WRITE_VALUE: Final[str] = """
    const proto = this.tagName === 'TEXTAREA' ? HTMLTextAreaElement.prototype : HTMLInputElement.prototype;
    const desc = Object.getOwnPropertyDescriptor(proto, 'value');
    if (desc && desc.set) { desc.set.call(this, arguments[0]); } else { this.value = arguments[0]; }
    return this.value;
    """

    READ_VALUE: Final[str] = "return this.value === undefined ? '' : String(this.value);"

    IS_ATTACHED: Final[str] = "return this.isConnected === true;"

    # arguments[0] = 事件类型，arguments[1] = 按键字符
    DISPATCH_EVENT: Final[str] = """
    const kind = arguments[0];
    const key = arguments[1] || '';
    if (!this.isConnected) { return false; }
    if (kind === 'focus') {
        this.focus();
        this.dispatchEvent(new FocusEvent('focusin', { bubbles: true, cancelable: true }));
        return true;
    }
    if (kind === 'blur') {
        this.dispatchEvent(new FocusEvent('focusout', { bubbles: true, cancelable: true }));
        this.blur();
        return true;
    }
    if (kind === 'keydown' || kind === 'keypress' || kind === 'keyup') {
        const code = key ? key.charCodeAt(0) : 0;
        this.dispatchEvent(new KeyboardEvent(kind, {
            key: key, bubbles: true, cancelable: true,
            keyCode: code, charCode: kind === 'keypress' ? code : 0, which: code
        }));
        return true;
    }
    if (kind === 'input') {
        this.dispatchEvent(new InputEvent('input', {
            bubbles: true, cancelable: true, data: key || null,
            inputType: key ? 'insertText' : 'deleteContentBackward'
        }));
        return true;
    }
    this.dispatchEvent(new Event(kind, { bubbles: true, cancelable: true }));
    return true;
    """

    # radio 关联的 label 文本：labels 集合 -> 包裹的 label -> 相邻文本
    LABEL_TEXT: Final[str] = """
    let text = '';
    if (this.labels && this.labels.length) {
        text = Array.from(this.labels).map(l => l.innerText || l.textContent || '').join(' ');
    }
    if (!text) {
        const wrap = this.closest('label');
        if (wrap) { text = wrap.innerText || wrap.textContent || ''; }
    }
    if (!text && this.nextElementSibling) {
        text = this.nextElementSibling.innerText || this.nextElementSibling.textContent || '';
    }
    if (!text && this.nextSibling && this.nextSibling.nodeType === 3) {
        text = this.nextSibling.textContent || '';
    }
    return (text || this.value || '').trim();
    """

    # ============================================================
    # 文本匹配（备用路径轮询用）
    # ============================================================
    # arguments[0] = 标记文本，arguments[1] = 标签列表
    # 只返回可见且不包含其他命中的元素（最内层），一次往返
    TEXT_MATCHES: Final[str] = """
    const marker = arguments[0];
    const tags = arguments[1] || [];
    if (!marker || !tags.length) { return []; }
    const visible = function (el) {
        const style = window.getComputedStyle(el);
        if (style.display === 'none' || style.visibility === 'hidden') { return false; }
        return el.getClientRects().length > 0;
    };
    const hits = Array.from(document.querySelectorAll(tags.join(','))).filter(function (el) {
        return (el.textContent || '').indexOf(marker) >= 0 && visible(el);
    });
    return hits.filter(function (el) {
        return !hits.some(function (other) { return other !== el && el.contains(other); });
    });
    """

    # ============================================================
    # window.open 垫片 + 消息发件箱
    # ============================================================
    # 作为新文档初始化脚本注册（Page.addScriptToEvaluateOnNewDocument），
    # 每个文档在页面脚本之前就装好。其余跳转由宿主在 CDP 层拦截。
    # iframe 里的消息尽量投递到顶层发件箱。
    NAVIGATION_SHIM: Final[str] = """
    (function () {
        if (window.__ghostpayShim) { return; }
        window.__ghostpayShim = true;
        window.__ghostpayOutbox = window.__ghostpayOutbox || [];
        window.__ghostpayPost = function (message) {
            let box = window.__ghostpayOutbox;
            try {
                if (window.top !== window && window.top.__ghostpayOutbox) { box = window.top.__ghostpayOutbox; }
            } catch (e) { /* 跨域 iframe 用自己的发件箱 */ }
            box.push(message);
        };
        window.__ghostpayDrain = function () {
            const out = window.__ghostpayOutbox || [];
            window.__ghostpayOutbox = [];
            return out;
        };
        const nativeOpen = window.open;
        window.open = function (url) {
            if (url) {
                window.__ghostpayPost({ type: 'NAVIGATE', url: new URL(String(url), location.href).href });
                return null;
            }
            return nativeOpen.apply(window, arguments);
        };
    })();
    """

    OUTBOX_DRAIN: Final[str] = """
    return (function() {
        if (window.__ghostpayDrain) { return window.__ghostpayDrain(); }
        return [];
    })();
    """

    @staticmethod
    def get_set_generation_js(generation: int) -> str:
        """写入页面内的当前代际，旧定时器醒来后发现不匹配即退出"""
        return f"window.__ghostpayGeneration = {int(generation)}; return true;"
