from forum_api.app.schemas.comment import Comment
from forum_api.app.services.search_service import build_failure_table, search, search_items


def _comment(comment_id, content):
    return Comment(id=comment_id, post_id=1, author_username="alice", content=content, created_at=0)


def test_overlapping_matches():
    assert search("aaa", "aa") == [0, 1]
    assert search("abababa", "aba") == [0, 2, 4]


def test_case_insensitive_both_ways():
    assert search("Hello HELLO hello", "hello") == [0, 6, 12]
    assert search("hello", "HeLLo") == [0]


def test_empty_and_too_long_needle():
    assert search("anything", "") == []
    assert search("ab", "abc") == []
    assert search("", "a") == []


def test_no_match():
    assert search("forum", "post") == []


def test_failure_table():
    assert build_failure_table("aabaaab") == [0, 1, 0, 1, 2, 2, 3]
    assert build_failure_table("") == []


def test_search_items_over_comments():
    items = [
        _comment(1, "This is a test comment with pattern"),
        _comment(2, "Another comment without it"),
        _comment(3, "Yet another test comment for testing"),
    ]

    result = search_items(items, "test", lambda c: c.content)

    assert result.pattern == "test"
    assert [m.item.id for m in result.matches] == [1, 3]
    assert result.matches[0].indexes == [10]
    assert result.matches[1].indexes == [12, 29]
    assert result.count_matches() == 3
    assert result.has_matches()


def test_search_items_without_matches():
    result = search_items([_comment(1, "nothing here")], "test", lambda c: c.content)
    assert not result.has_matches()
    assert result.count_matches() == 0


def test_search_result_serializes_with_aliases():
    result = search_items([_comment(7, "a test")], "test", lambda c: c.content)
    wire = result.model_dump(by_alias=True, mode="json")
    assert wire["matches"][0]["indexes"] == [2]
    assert wire["matches"][0]["item"]["postId"] == 1
    assert wire["matches"][0]["item"]["userName"] == "alice"


def test_offsets_index_the_original_text():
    # "İ" lower-cases to two code points; later offsets must not shift.
    assert search("İx test", "test") == [3]
    assert search("İİ test TEST", "test") == [3, 8]
    assert search("ÀB àb", "àb") == [0, 3]
