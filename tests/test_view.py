"""Tests for wikitext_sync.sync.view: ViewEngine and the HTML wrappers."""

from wikitext_sync.sync.errors import ApiError, TransportError
from wikitext_sync.sync.metadata import embed
from wikitext_sync.sync.models import PageInfo, PullOptions, SyncKind
from wikitext_sync.sync.responses import ParseInfo
from wikitext_sync.sync.view import (
    ViewEngine,
    load_url,
    render_diff_html,
    render_view_html,
)

BASE = "https://wiki.example.org/wiki/"


def _document(body="Hello '''world'''", **info):
    info.setdefault("page_title", "Main Page")
    return embed(PageInfo(**info)) + "\n\n" + body


def _parse(title="Main Page", text="<p>Hello <b>world</b></p>", **extra):
    parse = {
        "title": title,
        "pageid": 1,
        "displaytitle": f"<span>{title}</span>",
        "text": {"*": text},
        "categorieshtml": {"*": '<div id="catlinks"></div>'},
    }
    parse.update(extra)
    return {"parse": parse}


def _diff(body, title="Main Page"):
    return {
        "batchcomplete": "",
        "query": {
            "pages": {
                "1": {
                    "pageid": 1,
                    "ns": 0,
                    "title": title,
                    "revisions": [{"diff": {"from": 42, "*": body}}],
                }
            }
        },
    }


# -------------------------------------------------------------------------
# HTML wrappers
# -------------------------------------------------------------------------


class TestRenderViewHtml:
    def test_default_head(self):
        page = render_view_html(
            ParseInfo.model_validate(_parse()["parse"]), BASE, "p { color: red; }"
        )
        assert page.startswith(
            '<!DOCTYPE html><html><head><base href="https://wiki.example.org/wiki/" />'
            "<style>p { color: red; }</style></head><body>"
        )
        assert '<div id="mw-content-text"><p>Hello <b>world</b></p></div>' in page
        assert page.index("mw-content-text") < page.index("catlinks")
        assert page.endswith("});</script></body></html>")

    def test_wiki_head_used_when_present(self):
        parse = ParseInfo.model_validate(
            _parse(headhtml={"*": '<!DOCTYPE html><html class="client-nojs"><head><meta charset="UTF-8"/></head><body class="mw">'})["parse"]
        )
        page = render_view_html(parse, BASE)
        assert page.startswith(
            '<!DOCTYPE html><html class="client-nojs"><head><base href="https://wiki.example.org/wiki/" />'
            '<style></style><meta charset="UTF-8"/>'
        )
        assert page.count("<head>") == 1

    def test_empty_text_has_no_content_div(self):
        parse = ParseInfo.model_validate({"title": "X", "text": {"*": ""}})
        page = render_view_html(parse, BASE)
        assert "mw-content-text" not in page

    def test_base_href_escaped(self):
        page = render_view_html(ParseInfo(), 'https://x/"wiki"/')
        assert '<base href="https://x/&quot;wiki&quot;/" />' in page


class TestRenderDiffHtml:
    def test_table_and_styles(self):
        page = render_diff_html(
            "<tr><td>-a</td></tr>", BASE, styles_url="https://wiki.example.org/w/load.php"
        )
        assert (
            'href="https://wiki.example.org/w/load.php?modules=mediawiki.diff.styles&amp;only=styles"'
            in page
        )
        assert '<table class="diff"><colgroup><col class="diff-marker">' in page
        assert "<tbody><tr><td>-a</td></tr></tbody></table>" in page
        assert page.endswith("</body></html>")

    def test_no_diff(self):
        page = render_diff_html(None, BASE)
        assert "<table" not in page
        assert "<link" not in page


class TestLoadUrl:
    def test_next_to_api(self):
        assert load_url("https://wiki.example.org/w/api.php") == "https://wiki.example.org/w/load.php"

    def test_not_api_php(self):
        assert load_url("https://wiki.example.org/api") is None


# -------------------------------------------------------------------------
# Request construction
# -------------------------------------------------------------------------


class TestBuildRequests:
    def test_preview(self, fake_transport, scripted_host):
        engine = ViewEngine(fake_transport(), scripted_host(), lang="zh-cn")
        params = engine.build_preview_request("text", "Main Page", None)
        assert params == {
            "action": "parse",
            "text": "text",
            "prop": "text|displaytitle|categorieshtml",
            "contentmodel": "wikitext",
            "pst": "1",
            "disableeditsection": "yes",
            "uselang": "zh-cn",
            "title": "Main Page",
        }

    def test_preview_with_css_and_model(self, fake_transport, scripted_host):
        engine = ViewEngine(fake_transport(), scripted_host(), get_css=True)
        params = engine.build_preview_request("x", None, "javascript")
        assert params["prop"] == "text|displaytitle|categorieshtml|headhtml"
        assert params["contentmodel"] == "javascript"
        assert params["uselang"] == "en"
        assert "title" not in params

    def test_diff(self, fake_transport, scripted_host):
        engine = ViewEngine(fake_transport(), scripted_host())
        assert engine.build_diff_request("new text", "Main Page") == {
            "action": "query",
            "prop": "revisions",
            "rvdifftotext": "new text",
            "rvdifftotextpst": "1",
            "rvprop": "",
            "titles": "Main Page",
            "uselang": "en",
        }

    def test_page(self, fake_transport, scripted_host):
        engine = ViewEngine(fake_transport(), scripted_host())
        params = engine.build_page_request(
            "Main Page", PullOptions(redirects=False, convert_titles=True)
        )
        assert params == {
            "action": "parse",
            "page": "Main Page",
            "prop": "text|displaytitle|categorieshtml",
            "redirects": "0",
            "converttitles": "1",
            "uselang": "en",
        }


# -------------------------------------------------------------------------
# preview
# -------------------------------------------------------------------------


class TestPreview:
    def test_header_stripped_and_title_recorded(self, fake_transport, scripted_host):
        transport = fake_transport(_parse())
        host = scripted_host(text=_document(content_model="wikitext"))
        result = ViewEngine(transport, host, base_href=BASE).preview()

        assert result.kind is SyncKind.SUCCESS
        assert result.title == "Main Page"
        assert result.display_title == "<span>Main Page</span>"
        assert result.info.page_title == "Main Page"
        assert "<p>Hello <b>world</b></p>" in result.content
        params = transport.requests[0]
        assert params["text"] == "Hello '''world'''"
        assert params["title"] == "Main Page"
        assert params["contentmodel"] == "wikitext"

    def test_title_from_file_name(self, fake_transport, scripted_host):
        transport = fake_transport(_parse(title="Help"))
        host = scripted_host(text="plain", file_name="/docs/Help.wiki")
        result = ViewEngine(transport, host).preview()
        assert result.title == "Help"
        assert transport.requests[0]["title"] == "Help"

    def test_untitled_still_rendered(self, fake_transport, scripted_host):
        transport = fake_transport(_parse(title="API"))
        result = ViewEngine(transport, scripted_host()).preview("plain")
        assert result.kind is SyncKind.SUCCESS
        assert "title" not in transport.requests[0]

    def test_status_shown_and_cleared(self, fake_transport, scripted_host):
        host = scripted_host(text="x")
        ViewEngine(fake_transport(_parse()), host).preview()
        assert host.status_history == ["Wikitext: Getting view..."]
        assert host.active_status is None

    def test_no_document(self, fake_transport, scripted_host):
        transport = fake_transport()
        host = scripted_host()
        result = ViewEngine(transport, host).preview()
        assert result.kind is SyncKind.ERROR
        assert result.error_kind == "no_document"
        assert host.messages[0].level == "warning"
        assert transport.requests == []

    def test_api_error_reported(self, fake_transport, scripted_host):
        host = scripted_host(text="x")
        transport = fake_transport(ApiError("invalidtitle", "Bad title \"<\"."))
        result = ViewEngine(transport, host).preview()
        assert result.kind is SyncKind.ERROR
        assert result.error_kind == "api"
        assert [(m.level, m.text) for m in host.messages] == [
            ("error", 'Error: Bad title "<".')
        ]
        assert host.active_status is None

    def test_missing_parse_is_malformed(self, fake_transport, scripted_host):
        result = ViewEngine(fake_transport({"batchcomplete": ""}), scripted_host(text="x")).preview()
        assert result.kind is SyncKind.ERROR
        assert result.error_kind == "malformed"


# -------------------------------------------------------------------------
# diff
# -------------------------------------------------------------------------


class TestDiff:
    def test_changes_rendered(self, fake_transport, scripted_host):
        transport = fake_transport(_diff("<tr><td>+world</td></tr>"))
        host = scripted_host(text=_document())
        result = ViewEngine(
            transport, host, styles_url="https://wiki.example.org/w/load.php"
        ).diff()

        assert result.kind is SyncKind.SUCCESS
        assert result.title == "Main Page"
        assert "<tbody><tr><td>+world</td></tr></tbody>" in result.content
        assert "mediawiki.diff.styles" in result.content
        assert transport.requests[0]["rvdifftotext"] == "Hello '''world'''"
        assert transport.requests[0]["titles"] == "Main Page"

    def test_identical_text_is_no_change(self, fake_transport, scripted_host):
        result = ViewEngine(fake_transport(_diff("")), scripted_host(text=_document())).diff()
        assert result.kind is SyncKind.NO_CHANGE
        assert "<table" not in result.content

    def test_title_argument_wins(self, fake_transport, scripted_host):
        transport = fake_transport(_diff("<tr></tr>", title="Sandbox"))
        ViewEngine(transport, scripted_host(text=_document())).diff(title="Sandbox")
        assert transport.requests[0]["titles"] == "Sandbox"

    def test_missing_page_warns(self, fake_transport, scripted_host):
        missing = {
            "batchcomplete": "",
            "query": {"pages": {"-1": {"ns": 0, "title": "Nowhere", "missing": ""}}},
        }
        host = scripted_host(text="x")
        result = ViewEngine(fake_transport(missing), host).diff(title="Nowhere")

        assert result.kind is SyncKind.MISSING
        assert result.title == "Nowhere"
        [message] = host.messages
        assert message.level == "warning"
        assert message.text.startswith('The page "Nowhere" you are looking for does not exist.')

    def test_invalid_title_warns_with_reason(self, fake_transport, scripted_host):
        invalid = {
            "query": {
                "pages": {
                    "-1": {"title": "<", "invalid": "", "invalidreason": "Bad title."}
                }
            }
        }
        host = scripted_host(text="x")
        result = ViewEngine(fake_transport(invalid), host).diff(title="<")
        assert result.kind is SyncKind.MISSING
        assert result.reason == "Bad title."
        assert "Bad title." in host.messages[0].text

    def test_no_title(self, fake_transport, scripted_host):
        transport = fake_transport()
        host = scripted_host(text="no header")
        result = ViewEngine(transport, host).diff()
        assert result.error_kind == "no_title"
        assert host.messages[0].level == "warning"
        assert transport.requests == []

    def test_transport_error(self, fake_transport, scripted_host):
        host = scripted_host(text=_document())
        result = ViewEngine(fake_transport(TransportError("down")), host).diff()
        assert result.kind is SyncKind.ERROR
        assert result.error_kind == "transport"
        assert host.active_status is None


# -------------------------------------------------------------------------
# view_page
# -------------------------------------------------------------------------


class TestViewPage:
    def test_renders_saved_page(self, fake_transport, scripted_host):
        transport = fake_transport(_parse())
        result = ViewEngine(transport, scripted_host(), base_href=BASE).view_page("Main Page")

        assert result.kind is SyncKind.SUCCESS
        assert result.info is None
        assert '<base href="https://wiki.example.org/wiki/" />' in result.content
        assert transport.requests[0]["page"] == "Main Page"
        assert transport.requests[0]["redirects"] == "1"

    def test_redirect_target_title(self, fake_transport, scripted_host):
        result = ViewEngine(fake_transport(_parse(title="Target")), scripted_host()).view_page("Source")
        assert result.title == "Target"

    def test_missing_page_is_api_error(self, fake_transport, scripted_host):
        host = scripted_host()
        transport = fake_transport(ApiError("missingtitle", "The page you specified doesn't exist."))
        result = ViewEngine(transport, host).view_page("Nowhere")
        assert result.error_kind == "api"
        assert result.title == "Nowhere"
        assert host.messages[0].level == "error"
