from __future__ import annotations

import random

import pytest

from lobsters_tui.datamodels import Comment
from lobsters_tui.errors import EmptyCollectionError, FetchError
from lobsters_tui.layout import REVERSE, strip_styles, visible_width
from lobsters_tui.view import NO_COMMENTS, NO_STORIES, Mode, Travel, View


def leaf(author: str, body: str = "") -> Comment:
    return Comment(votes=1, author=author, time="1 hour ago", body=body)


@pytest.fixture
def source(make_source):
    return make_source(total=100, batch_size=25)


@pytest.fixture
def view(source):
    v = View(source, page_size=10, batch_size=25)
    v.ensure_loaded_for_current_page()
    return v


# --- Lazy loading ---
def test_new_view_is_empty_list_mode(source):
    v = View(source, page_size=10, batch_size=25)
    assert v.stories == []
    assert v.mode is Mode.LIST
    assert v.current_list_position == 0
    assert source.batch_requests == []


def test_first_page_loads_first_batch(source):
    v = View(source, page_size=10, batch_size=25)
    v.ensure_loaded_for_current_page()
    assert source.batch_requests == [1]
    assert len(v.stories) == 25


def test_position_across_batch_boundary_from_empty(source):
    v = View(source, page_size=10, batch_size=25)
    v.list_position = 22
    v.ensure_loaded_for_current_page()
    assert len(v.stories) >= 30
    assert source.batch_requests == [1, 2]


def test_position_across_batch_boundary_after_first_batch(view, source):
    assert source.batch_requests == [1]
    view.list_position = 22
    view.ensure_loaded_for_current_page()
    assert len(view.stories) >= 30
    assert source.batch_requests == [1, 2]


def test_page_inside_loaded_stories_issues_no_request(view, source):
    view.list_position = 19
    view.ensure_loaded_for_current_page()
    assert source.batch_requests == [1]


def test_loading_is_idempotent(view, source):
    view.ensure_loaded_for_current_page()
    view.ensure_loaded_for_current_page()
    assert source.batch_requests == [1]


def test_stories_keep_site_order(view, source):
    view.list_position = 60
    view.ensure_loaded_for_current_page()
    assert [s.title for s in view.stories] == [s.title for s in source.stories[:75]]


def test_partial_last_batch_stops_loading(make_source):
    source = make_source(total=30, batch_size=25)
    v = View(source, page_size=10, batch_size=25)
    v.list_position = 25
    v.ensure_loaded_for_current_page()
    assert len(v.stories) == 30
    assert v.exhausted
    assert source.batch_requests == [1, 2]

    v.go(Travel.NEXT_STEP)
    v.ensure_loaded_for_current_page()
    assert v.current_list_position == 29
    assert source.batch_requests == [1, 2]


def test_position_is_clamped_when_site_runs_out(make_source):
    source = make_source(total=27, batch_size=25)
    v = View(source, page_size=10, batch_size=25)
    v.list_position = 35
    v.ensure_loaded_for_current_page()
    assert len(v.stories) == 27
    assert v.current_list_position == 26


def test_empty_site(make_source):
    source = make_source(total=0)
    v = View(source, page_size=10, batch_size=25)
    v.ensure_loaded_for_current_page()
    assert v.stories == []
    assert v.exhausted
    assert v.render(80, 20) == NO_STORIES
    v.ensure_loaded_for_current_page()
    assert source.batch_requests == [1]


def test_failed_batch_leaves_stories_unchanged(view, source):
    source.fail_batches.add(2)
    view.list_position = 22
    with pytest.raises(FetchError):
        view.ensure_loaded_for_current_page()
    assert len(view.stories) == 25

    source.fail_batches.clear()
    view.ensure_loaded_for_current_page()
    assert len(view.stories) == 50


def test_clamp_position_after_failed_load(view, source):
    source.fail_batches.add(2)
    view.go(Travel.NEXT_STEP)
    view.go(Travel.NEXT_STEP)
    view.go(Travel.NEXT_STEP)
    with pytest.raises(FetchError):
        view.ensure_loaded_for_current_page()
    view.clamp_position()
    assert view.current_list_position == 24
    assert "Story 24" in strip_styles(view.render(100, 30))


def test_site_page_number(view):
    assert view.current_site_page_number == 1
    view.list_position = 24
    assert view.current_site_page_number == 1
    view.list_position = 25
    assert view.current_site_page_number == 2


# --- Navigation ---
def test_list_navigation(view):
    view.go(Travel.NEXT_ITEM)
    assert view.current_list_position == 1
    view.go(Travel.NEXT_STEP)
    assert view.current_list_position == 11
    view.go(Travel.PREV_STEP)
    assert view.current_list_position == 1
    view.go(Travel.PREV_STEP)
    assert view.current_list_position == 0
    view.go(Travel.PREV_ITEM)
    assert view.current_list_position == 0
    view.go(Travel.BOTTOM)
    assert view.current_list_position == 24
    view.go(Travel.TOP)
    assert view.current_list_position == 0


def test_list_movement_resets_comment_scroll(view):
    view.comments_scroll_offset = 5
    view.go(Travel.NEXT_ITEM)
    assert view.comments_scroll_offset == 0


def test_navigation_without_stories_is_a_no_op(make_source):
    v = View(make_source(total=0), page_size=10)
    for travel in Travel:
        v.go(travel)
    assert v.current_list_position == 0
    with pytest.raises(EmptyCollectionError):
        v.selected_story()


@pytest.mark.parametrize("seed", range(10))
def test_position_stays_in_bounds(make_source, seed):
    rng = random.Random(seed)
    source = make_source(total=63, batch_size=25)
    v = View(source, page_size=7, batch_size=25)
    v.ensure_loaded()
    commands = list(Travel) + ["toggle"]
    for _ in range(300):
        command = rng.choice(commands)
        if command == "toggle":
            v.toggle()
        else:
            v.go(command)
        assert 0 <= v.current_list_position
        if v.exhausted:
            assert v.current_list_position < len(v.stories)
        else:
            assert v.current_list_position < len(v.stories) + v.page_size
        v.ensure_loaded()
        assert 0 <= v.current_list_position < len(v.stories)
        v.render(80, 24)
        assert v.comments_scroll_offset >= 0


# --- Modes ---
def test_mode_switching(view):
    view.enter_comments()
    assert view.mode is Mode.COMMENTS
    view.leave_comments()
    assert view.mode is Mode.LIST
    view.toggle()
    assert view.mode is Mode.COMMENTS
    view.toggle()
    assert view.mode is Mode.LIST


def test_comments_mode_steps_by_story(view):
    view.enter_comments()
    view.go(Travel.NEXT_STEP)
    assert view.current_list_position == 1
    view.go(Travel.PREV_STEP)
    view.go(Travel.PREV_STEP)
    assert view.current_list_position == 0


# --- Comments ---
def scrolling_source(make_source):
    thread = [leaf(f"user{i}") for i in range(50)]
    return make_source(
        total=25,
        comments={"https://lobste.rs/s/0": thread},
        comments_numbers={0: 50},
    )


def test_comments_are_fetched_once(make_source):
    tree = [
        Comment(
            votes=3,
            author="alice",
            time="1 hour ago",
            body="top",
            children=(leaf("bob"), leaf("carol", "reply"), leaf("grace")),
        ),
        leaf("dave"),
        Comment(
            votes=1, author="erin", time="now", body="", children=(leaf("frank"),)
        ),
    ]
    source = make_source(
        total=25, comments={"https://lobste.rs/s/0": tree}, comments_numbers={0: 7}
    )
    v = View(source, page_size=10)
    v.ensure_loaded()
    assert source.comment_requests == []

    v.enter_comments()
    v.ensure_loaded()
    assert v.selected_story().comments_descendants() == 7
    assert source.comment_requests == ["https://lobste.rs/s/0"]

    before = v.render(80, 40)
    v.ensure_comments_loaded()
    assert source.comment_requests == ["https://lobste.rs/s/0"]
    assert v.render(80, 40) == before


def test_story_without_comments_shows_placeholder(view, source):
    view.enter_comments()
    view.ensure_loaded()
    assert source.comment_requests == []
    assert view.render(80, 20) == NO_COMMENTS


def test_comment_scroll_is_clamped(make_source):
    v = View(scrolling_source(make_source), page_size=10)
    v.enter_comments()
    v.ensure_loaded()
    v.comments_scroll_offset = 45
    lines = strip_styles(v.render(80, 20)).split("\n")
    assert len(lines) == 20
    assert [line.split()[1] for line in lines] == [f"user{i}" for i in range(30, 50)]
    assert v.comments_scroll_offset == 30


def test_comment_scrolling_commands(make_source):
    v = View(scrolling_source(make_source), page_size=10)
    v.enter_comments()
    v.ensure_loaded()
    v.render(80, 20)

    v.go(Travel.NEXT_ITEM)
    assert v.comments_scroll_offset == 1
    v.go(Travel.BOTTOM)
    assert v.comments_scroll_offset == 30
    v.go(Travel.NEXT_ITEM)
    assert v.comments_scroll_offset == 30
    v.go(Travel.PREV_ITEM)
    assert v.comments_scroll_offset == 29
    v.go(Travel.TOP)
    assert v.comments_scroll_offset == 0
    v.go(Travel.PREV_ITEM)
    assert v.comments_scroll_offset == 0

    lines = strip_styles(v.render(80, 20)).split("\n")
    assert lines[0].split()[1] == "user0"


def test_changing_story_resets_comment_scroll(make_source):
    v = View(scrolling_source(make_source), page_size=10)
    v.enter_comments()
    v.ensure_loaded()
    v.render(80, 20)
    v.go(Travel.BOTTOM)
    v.go(Travel.NEXT_STEP)
    assert v.comments_scroll_offset == 0


def test_short_thread_is_not_scrolled(make_source):
    source = make_source(
        total=25,
        comments={"https://lobste.rs/s/0": [leaf("a"), leaf("b")]},
        comments_numbers={0: 2},
    )
    v = View(source, page_size=10)
    v.enter_comments()
    v.ensure_loaded()
    v.comments_scroll_offset = 10
    lines = strip_styles(v.render(80, 20)).split("\n")
    assert [line.split()[1] for line in lines] == ["a", "b"]
    assert v.comments_scroll_offset == 0


def test_comments_have_a_margin(make_source):
    v = View(scrolling_source(make_source), page_size=10)
    v.enter_comments()
    v.ensure_loaded()
    for line in strip_styles(v.render(80, 20)).split("\n"):
        assert line.startswith("  ")


# --- List rendering ---
def test_list_renders_the_page_holding_the_selection(make_source):
    v = View(make_source(total=25), page_size=3)
    v.ensure_loaded()
    v.list_position = 4
    rendered = v.render(100, 30)
    plain = strip_styles(rendered)
    for n in (3, 4, 5):
        assert f"Story {n}" in plain
    assert "Story 2" not in plain
    assert "Story 6" not in plain
    assert rendered.count(REVERSE.render("4")) == 1


def test_last_page_may_be_short(make_source):
    v = View(make_source(total=10, batch_size=25), page_size=4)
    v.ensure_loaded()
    v.go(Travel.BOTTOM)
    plain = strip_styles(v.render(100, 30))
    assert "Story 8" in plain
    assert "Story 9" in plain
    assert "Story 7" not in plain


def test_needs_loading(view):
    assert not view.needs_loading()
    view.go(Travel.NEXT_STEP)
    view.go(Travel.NEXT_STEP)
    assert view.needs_loading()
    view.ensure_loaded()
    assert not view.needs_loading()


def test_forward_move_past_tail_is_settled_by_loading(view, source):
    view.list_position = 24
    view.go(Travel.NEXT_ITEM)
    assert view.current_list_position == 25
    assert view.needs_loading()
    view.ensure_loaded_for_current_page()
    assert view.current_list_position == 25
    assert view.current_list_position < len(view.stories)
    assert source.batch_requests == [1, 2]


def test_forward_move_is_clamped_once_exhausted(make_source):
    v = View(make_source(total=20, batch_size=25), page_size=10)
    v.ensure_loaded()
    assert v.exhausted
    v.list_position = 19
    for travel in (Travel.NEXT_ITEM, Travel.NEXT_STEP):
        v.go(travel)
        assert v.current_list_position == 19


def test_deep_comment_thread_fits_the_pane(make_source):
    node = leaf("deepest", "a reply at the bottom of a very long thread")
    for n in range(120):
        node = Comment(
            votes=0, author=f"user{n}", time="1 hour ago", body="", children=(node,)
        )
    source = make_source(
        total=25,
        comments={"https://lobste.rs/s/0": [node]},
        comments_numbers={0: 121},
    )
    v = View(source, page_size=10)
    v.enter_comments()
    v.ensure_loaded()
    lines = strip_styles(v.render(80, 1000)).split("\n")
    assert all(visible_width(line) <= 80 for line in lines)
    assert len(lines) == v._comment_lines
