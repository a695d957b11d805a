from imagevault.keywords import (
    decode_keywords,
    encode_keywords,
    matches,
    parse_keywords,
    tagging_header,
)


def test_parse_keywords_normalizes():
    assert parse_keywords("A, b ,C") == ["a", "b", "c"]
    assert parse_keywords("Beach,,  , Sunset ") == ["beach", "sunset"]

def test_parse_keywords_keeps_duplicates():
    assert parse_keywords("cat, Cat, CAT") == ["cat", "cat", "cat"]

def test_parse_keywords_empty():
    assert parse_keywords(None) == []
    assert parse_keywords("") == []
    assert parse_keywords("   ,  , ") == []

def test_tagging_header_is_percent_encoded():
    assert tagging_header(["beach", "sunset"]) == "keywords=beach%7Csunset"
    assert tagging_header(["new york", "café"]) == "keywords=new%20york%7Ccaf%C3%A9"
    assert tagging_header([]) is None

def test_decode_keywords():
    assert decode_keywords("beach|sunset") == ["beach", "sunset"]
    assert decode_keywords("new%20york%7Ccaf%C3%A9") == ["new york", "café"]
    assert decode_keywords("") == []
    assert decode_keywords(None) == []

def test_encode_decode_round_trip():
    keywords = ["a", "b b", "c&d", "100%"]
    assert decode_keywords(encode_keywords(keywords)) == keywords

def test_separator_inside_keyword_is_not_escaped():
    # Known limitation: an embedded "|" splits the keyword on the way back
    assert decode_keywords(encode_keywords(["black|white", "cat"])) == ["black", "white", "cat"]

def test_matches():
    assert matches(["beach", "sunset"], "set")
    assert matches(["beach", "sunset"], "SET")
    assert not matches(["beach", "sunset"], "zz")
    assert matches([], "")
    assert matches([], None)
    assert not matches([], "a")
