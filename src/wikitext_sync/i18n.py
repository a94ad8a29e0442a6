"""Localized user-facing messages.

Messages use ``$1``..``$n`` placeholders.  Lookup is case-insensitive;
a key missing from the requested language falls back to English, and a
key missing everywhere is returned unchanged.
"""

_EN: dict[str, str] = {
    "button-yes": "Yes",
    "button-no": "No",
    "edit-result-nochange": 'No changes have occurred. Edit page "$1" (Page ID: "$2") action status is "$3" with Content Model "$4". Is watched: $5.',
    "edit-result-success": 'Edit page "$1" (Page ID: "$2") action status is "$3" with Content Model "$4" (Version: "$6" => "$7", Time: $8). Is watched: $5.',
    "edit-summary-placeholder": " // Edit via Wikitext Extension for VSCode",
    "enter-page-name": "Enter the page name here.",
    "enter-summary": "Enter the summary of this edit action.",
    "enter-url-to-ref": "Input the URL that you want to ref.",
    "error": "Error: $1",
    "error-edit": "Error: $1. Your token: $2.",
    "error-getting-token": "Could not get edit token: NEW: $1; OLD: $2",
    "error-interwiki": 'Interwiki page "$1" in space "$2" are currently not supported. Please try to modify host.',
    "error-no-active-editor": "There is no active text editor.",
    "error-no-title-given": "Empty Title, Post failed.",
    "error-nonexist": 'The page "$1" you are looking for does not exist. $2 Do you want to create one?',
    "error-unsupported-content-model": "Unsupported content model: $1. Please report this issue to the author of this extension.",
    "false": "false",
    "from-to": "$1 => $2",
    "logout-result-success": "Logout successfully.",
    "page-info-comment": "Please do not remove this struct. It's record contains some important informations of edit. This struct will be removed automatically after you push edits.",
    "pull-result-success": 'Get page "$1" with Content Model "$2". Normalized: $3, Redirect: $4.',
    "true": "true",
    "version-indeterminate": "Could not determine the MediaWiki version of this site. Some features may not work as expected.",
    "version-too-old": "Your MediaWiki version may be too old. This may cause some compatibility issues. Please update to the v1.32.0 or later.",
    "wikitext-cite": "Wikitext: Parsing...",
    "wikitext-edit": "Wikitext: Editing...",
    "wikitext-logout": "Wikitext: Logout...",
    "wikitext-preview": "Wikitext: Getting view...",
    "wikitext-raw": "Wikitext: Getting code...",
}

_ZH_CN: dict[str, str] = {
    "button-yes": "是",
    "button-no": "否",
    "edit-result-nochange": "页面内容无变化。编辑页面“$1”（ID：$2），状态为“$3”，内容模型为“$4”。监视状态：$5。",
    "edit-result-success": "编辑页面“$1”（ID：$2），状态为“$3”，内容模型为“$4”（版本：“$6” → “$7”，时间戳：$8）。监视状态：$5。",
    "edit-summary-placeholder": " // 通过 VSCode 的 Wikitext 扩展进行编辑",
    "enter-page-name": "请输入页面名。",
    "enter-summary": "请输入编辑摘要。",
    "enter-url-to-ref": "请输入您想要获取页面的 URL。",
    "error": "错误：$1",
    "error-edit": "错误：$1。您的令牌：$2。",
    "error-getting-token": "无法获取编辑令牌。新：$1，旧：$2。",
    "error-interwiki": "“$2”空间中的跨 wiki 页面“$1”目前不受支持。请尝试修改域名。",
    "error-no-active-editor": "没有活动的文本编辑器。",
    "error-no-title-given": "没有给定标题，提交失败。",
    "error-nonexist": "您尝试获取的页面“$1”不存在。$2是否需要创建？",
    "false": "否",
    "from-to": "$1 → $2",
    "logout-result-success": "退出登录成功。",
    "page-info-comment": "请不要删除此段落。它的记录包含了一些重要的编辑信息。提交编辑时，此段落将自动删除。",
    "pull-result-success": "获取页面“$1”，内容模型为“$2”。标准化：$3，重定向：$4。",
    "true": "是",
    "wikitext-edit": "Wikitext: 正在提交编辑……",
    "wikitext-logout": "Wikitext: 正在退出登录……",
    "wikitext-preview": "Wikitext: 正在获取预览……",
    "wikitext-raw": "Wikitext: 正在获取源代码……",
}

_CATALOGUES: dict[str, dict[str, str]] = {"zh-cn": _ZH_CN}


def i18n(key: str, lang: str | None = None, *params: str) -> str:
    """Return the message for *key* in *lang* with placeholders filled.

    Args:
        key: Message key (case-insensitive).
        lang: Language code such as ``"en"`` or ``"zh-cn"``.
        *params: Values for ``$1``, ``$2``, ...

    Returns:
        The localized message, or *key* itself if no catalogue has it.
    """
    key = key.lower()
    catalogue = _CATALOGUES.get((lang or "").lower(), _EN)
    value = catalogue.get(key) or _EN.get(key) or key
    # Highest index first so "$1" never clobbers the prefix of "$10".
    for index in range(len(params), 0, -1):
        value = value.replace(f"${index}", params[index - 1])
    return value
