from ui_customizer.geometry import Rect
from ui_customizer.memory_tree import MemoryGuideOverlay, MemoryNode
from ui_customizer.snap_engine import HORIZONTAL, VERTICAL, SnapEngine, SnapGuide, compute_guides


def test_compute_guides_matches_edges_and_centers():
    target = Rect(0, 40, 300, 200)
    siblings = [Rect(305, 40, 300, 200)]

    guides = compute_guides(target, siblings, 10)

    assert guides == [
        SnapGuide(VERTICAL, 305),
        SnapGuide(HORIZONTAL, 40),
        SnapGuide(HORIZONTAL, 240),
        SnapGuide(HORIZONTAL, 140),
    ]


def test_compute_guides_deduplicates_across_siblings():
    target = Rect(0, 0, 100, 100)
    siblings = [Rect(200, 0, 100, 100), Rect(400, 0, 100, 100)]

    guides = compute_guides(target, siblings, 5)

    assert [guide for guide in guides if guide.orientation == HORIZONTAL] == [
        SnapGuide(HORIZONTAL, 0),
        SnapGuide(HORIZONTAL, 100),
        SnapGuide(HORIZONTAL, 50),
    ]
    assert len(guides) == len(set(guides))


def test_compute_guides_respects_threshold():
    assert compute_guides(Rect(0, 0, 50, 50), [Rect(200, 200, 50, 50)], 10) == []


def test_update_redraws_overlay_each_frame():
    overlay = MemoryGuideOverlay(MemoryNode())
    engine = SnapEngine(10)

    engine.update(overlay, Rect(0, 0, 100, 100), [Rect(0, 300, 100, 100)])
    engine.update(overlay, Rect(0, 0, 100, 100), [Rect(0, 300, 100, 100)])

    assert overlay.vertical == [0, 100, 50]
    assert overlay.horizontal == []

    engine.clear(overlay)
    assert overlay.vertical == []


def test_update_without_overlay_still_reports_guides():
    guides = SnapEngine(10).update(None, Rect(0, 0, 10, 10), [Rect(0, 50, 10, 10)])
    assert SnapGuide(VERTICAL, 0) in guides
