"""
Device Registry Tests

Tests for DeviceRegistry showing:
- Filtering to video inputs
- Auto-selection of the first camera
- Selection by id
- Wrap-around camera cycling

To run:
    pytest tests/capture/controllers/test_device_registry.py -v
"""

import pytest

from capture.constants import DeviceKind
from capture.models import DeviceDescriptor

CAM_A = DeviceDescriptor("a", "Camera A")
CAM_B = DeviceDescriptor("b", "Camera B")
CAM_C = DeviceDescriptor("c", "Camera C")
MIC = DeviceDescriptor("m", "Microphone", DeviceKind.AUDIO_INPUT)

# =============================================================================
# POPULATE TESTS
# =============================================================================


@pytest.mark.unit
def test_registry_starts_empty(registry):
    """Test new registry has no devices and no selection."""
    assert len(registry) == 0
    assert registry.list() == []
    assert registry.selected() is None


@pytest.mark.unit
def test_populate_keeps_only_video_inputs(registry):
    """Test microphones are filtered out."""
    registry.populate([CAM_A, MIC, CAM_B])

    assert [d.id for d in registry.list()] == ["a", "b"]


@pytest.mark.unit
def test_populate_preserves_platform_order(registry):
    """Test devices keep enumeration order."""
    registry.populate([CAM_C, CAM_A, CAM_B])

    assert [d.id for d in registry.list()] == ["c", "a", "b"]


@pytest.mark.unit
def test_populate_drops_duplicate_ids(registry):
    """Test the same id reported twice is kept once."""
    registry.populate([CAM_A, DeviceDescriptor("a", "Camera A (again)"), CAM_B])

    assert len(registry) == 2
    assert registry.get("a").label == "Camera A"


@pytest.mark.unit
def test_populate_selects_first_camera(registry):
    """Test first camera is auto-selected."""
    registry.populate([MIC, CAM_B, CAM_A])

    assert registry.selected() == CAM_B


@pytest.mark.unit
def test_populate_keeps_selection_still_present(registry):
    """Test re-enumeration keeps a selection that still exists."""
    registry.populate([CAM_A, CAM_B])
    registry.select("b")

    registry.populate([CAM_A, CAM_B, CAM_C])

    assert registry.selected() == CAM_B


@pytest.mark.unit
def test_populate_replaces_vanished_selection(registry):
    """Test selection falls back to the first camera when it disappears."""
    registry.populate([CAM_A, CAM_B])
    registry.select("b")

    registry.populate([CAM_C, CAM_A])

    assert registry.selected() == CAM_C


@pytest.mark.unit
def test_populate_without_cameras_clears_selection(registry):
    """Test no cameras means no selection."""
    registry.populate([CAM_A])
    registry.populate([MIC])

    assert len(registry) == 0
    assert registry.selected() is None


# =============================================================================
# SELECTION TESTS
# =============================================================================


@pytest.mark.unit
def test_select_known_device(registry):
    """Test selecting a device by id."""
    registry.populate([CAM_A, CAM_B])

    device = registry.select("b")

    assert device == CAM_B
    assert registry.selected() == CAM_B


@pytest.mark.unit
def test_select_unknown_device_raises(registry):
    """Test selecting an unknown id raises KeyError."""
    registry.populate([CAM_A])

    with pytest.raises(KeyError):
        registry.select("missing")

    assert registry.selected() == CAM_A


@pytest.mark.unit
def test_list_returns_copy(registry):
    """Test callers cannot mutate the registry through list()."""
    registry.populate([CAM_A])

    registry.list().clear()

    assert len(registry) == 1


@pytest.mark.unit
def test_clear(registry):
    """Test clear removes devices and selection."""
    registry.populate([CAM_A, CAM_B])

    registry.clear()

    assert len(registry) == 0
    assert registry.selected() is None


# =============================================================================
# CYCLING TESTS
# =============================================================================


@pytest.mark.unit
def test_next_cycles_in_order(registry):
    """Test next() walks the list in order."""
    registry.populate([CAM_A, CAM_B, CAM_C])

    assert registry.next("a") == CAM_B
    assert registry.next("b") == CAM_C


@pytest.mark.unit
def test_next_wraps_around(registry):
    """Test next() after the last device returns the first."""
    registry.populate([CAM_A, CAM_B, CAM_C])

    assert registry.next("c") == CAM_A


@pytest.mark.unit
def test_next_with_single_camera_returns_none(registry):
    """Test there is nothing to switch to with one camera."""
    registry.populate([CAM_A])

    assert registry.next("a") is None


@pytest.mark.unit
def test_next_with_unknown_current_returns_first(registry):
    """Test unknown current id starts from the first device."""
    registry.populate([CAM_A, CAM_B])

    assert registry.next("gone") == CAM_A
    assert registry.next(None) == CAM_A
