import pytest

from can_decoder.services.grouping_service import FrameView, group_frames


def test_groups_sorted_by_id_and_time(make_frames):
    frames = make_frames(
        ("300", [0x50, 0x01], 2.0),
        ("100", [0xA0, 0x01], 3.0),
        ("300", [0x50, 0x02], 1.0),
        ("100", [0x50, 0x03], 0.5),
    )
    groups = group_frames(frames)

    assert [can_id for can_id, _ in groups] == ["100", "300"]
    assert [f.timestamp for f in groups[0][1]] == [0.5, 3.0]
    assert [f.payload_hex for f in groups[1][1]] == ["02", "01"]


def test_equal_timestamps_keep_capture_order(make_frames):
    frames = make_frames(
        ("200", [0x50, 0x01]),
        ("200", [0x50, 0x02]),
        ("200", [0x50, 0x03]),
    )
    (_, members), = group_frames(frames)
    assert [f.sequence for f in members] == [0, 1, 2]
    assert all(f.timestamp == 0.0 for f in members)


def test_every_frame_in_exactly_one_group(make_frames):
    frames = make_frames(
        ("100", [0xA0, 0x82]),
        ("200", [0x50]),
        ("100", [0x10, 0x01, 0x02]),
        ("01111000", [0x00]),
        ("200", [0x51]),
    )
    groups = group_frames(frames)
    seen = [f.sequence for _, members in groups for f in members]
    assert sorted(seen) == [f.sequence for f in frames]
    for can_id, members in groups:
        assert all(f.can_id == can_id for f in members)


def test_hide_accounted_omits_empty_groups(make_frames):
    frames = make_frames(
        ("100", [0xA0, 0x01]),
        ("01111000", [0x00, 0x00]),
        ("200", [0x50, 0x01]),
        ("200", [0x10, 0x02]),
    )
    groups = group_frames(frames, FrameView.from_flags(hide_accounted=True))
    assert len(groups) == 1
    can_id, members = groups[0]
    assert can_id == "200"
    assert [f.header for f in members] == [0x50]


def test_hide_unaccounted(make_frames):
    frames = make_frames(
        ("100", [0xA0, 0x01]),
        ("01111000", [0x00, 0x00]),
        ("200", [0x50, 0x01]),
    )
    groups = group_frames(frames, FrameView.ACCOUNTED_ONLY)
    assert [can_id for can_id, _ in groups] == ["01111000", "100"]


def test_view_from_flags():
    assert FrameView.from_flags() is FrameView.ALL
    assert FrameView.from_flags(hide_accounted=True) is FrameView.UNACCOUNTED_ONLY
    assert FrameView.from_flags(hide_unaccounted=True) is FrameView.ACCOUNTED_ONLY
    with pytest.raises(ValueError):
        FrameView.from_flags(hide_accounted=True, hide_unaccounted=True)


def test_empty_input():
    assert group_frames([]) == []
