import pytest

from statebook.core.figma.parser import normalize_node_id, parse_figma_url


@pytest.mark.parametrize(
    "url, file_key, node_id",
    [
        ("https://www.figma.com/file/AbCdEFg12345/Design-System?node-id=120-880", "AbCdEFg12345", "120:880"),
        ("https://figma.com/design/XyZ987/Checkout?node-id=1%3A2", "XyZ987", "1:2"),
        ("https://www.figma.com/proto/Proto42/Flow?node_id=3-4", "Proto42", "3:4"),
        ("https://www.figma.com/community/file/123456789/Kit", "123456789", None),
        ("https://embed.figma.com/file/Key1/x", "Key1", None),
        ("https://www.figma.com/files/recent", None, None),
    ],
)
def test_parse_valid_links(url, file_key, node_id):
    parsed = parse_figma_url(url)
    assert parsed.is_valid
    assert parsed.file_key == file_key
    assert parsed.node_id == node_id


@pytest.mark.parametrize(
    "url",
    [
        "",
        "not a url",
        "figma.com/file/abc",
        "https://example.com/file/abc",
        "https://notfigma.com/file/abc",
        "https://figma.com.evil.io/file/abc",
        "https://www.figma.com:badport/file/abc",
        "https://foo bar.figma.com/file/x",
        "https://fo<o.figma.com/file/x",
        "https://www%20.figma.com/file/x",
        "https://www.figma.com^/file/x",
    ],
)
def test_parse_invalid_links(url):
    parsed = parse_figma_url(url)
    assert not parsed.is_valid
    assert parsed.file_key is None
    assert parsed.node_id is None


def test_host_match_is_case_insensitive():
    assert parse_figma_url("https://WWW.FIGMA.COM/file/Abc").is_valid


def test_empty_node_id_is_none():
    assert parse_figma_url("https://www.figma.com/file/Abc/x?node-id=").node_id is None


def test_node_id_prefers_dashed_param_name():
    parsed = parse_figma_url("https://www.figma.com/file/Abc/x?node_id=9-9&node-id=1-2")
    assert parsed.node_id == "1:2"


def test_normalize_node_id():
    assert normalize_node_id("120-880") == "120:880"
    assert normalize_node_id("120:880") == "120:880"
    assert normalize_node_id("1-2-3") == "1-2-3"
    assert normalize_node_id("I5:6;7:8") == "I5:6;7:8"
