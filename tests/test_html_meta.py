from relay.html_meta import find_meta_charset, find_meta_refresh


def test_meta_charset_attribute():
    assert find_meta_charset('<head><meta charset="euc-jp"></head>') == "euc-jp"


def test_meta_charset_unquoted_and_case_insensitive():
    assert find_meta_charset("<META CHARSET=Shift_JIS>") == "Shift_JIS"


def test_meta_http_equiv_content_type():
    html = '<meta http-equiv="Content-Type" content="text/html; charset=windows-1252">'
    assert find_meta_charset(html) == "windows-1252"


def test_charset_attribute_wins_over_http_equiv():
    html = (
        '<meta http-equiv="Content-Type" content="text/html; charset=iso-8859-1">'
        '<meta charset="utf-8">'
    )
    assert find_meta_charset(html) == "utf-8"


def test_no_charset():
    assert find_meta_charset("<html><head><title>x</title></head></html>") is None
    assert find_meta_charset("") is None


def test_meta_refresh_relative():
    html = '<meta http-equiv="refresh" content="0;URL=/next">'
    assert find_meta_refresh(html) == "/next"


def test_meta_refresh_absolute_with_space_and_delay():
    html = "<META HTTP-EQUIV='Refresh' CONTENT='5; url=https://example.org/landing'>"
    assert find_meta_refresh(html) == "https://example.org/landing"


def test_meta_refresh_quoted_target():
    html = '<meta http-equiv="refresh" content="0;URL=\'/quoted\'">'
    assert find_meta_refresh(html) == "/quoted"


def test_meta_refresh_without_url_is_ignored():
    assert find_meta_refresh('<meta http-equiv="refresh" content="30">') is None


def test_meta_refresh_other_attribute_order_is_not_matched():
    # Only the documented shape is recognised
    html = '<meta content="0;URL=/next" http-equiv="refresh">'
    assert find_meta_refresh(html) is None


def test_meta_refresh_empty():
    assert find_meta_refresh("") is None
