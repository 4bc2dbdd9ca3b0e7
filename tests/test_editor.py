"""Tests for the shape editor state machine."""

import pytest

from image_map.core.editor import EditorState, ShapeEditor
from image_map.core.gestures import DrawGesture, TranslateGesture, VertexDragGesture
from image_map.core.models import Hotspot, LabelType, ShapeKind, Store


def draw(editor, kind, start, end):
    """Arm a tool and drag out a shape."""
    editor.select_tool(kind)
    editor.press_background(start)
    editor.pointer_move(end)
    editor.pointer_release(end)


@pytest.fixture
def edit_editor(editor):
    editor.toggle_edit_mode()
    return editor


@pytest.fixture
def editing_rect(edit_editor):
    """Editor in edge editing on a fresh rectangle (10,10)-(40,40)."""
    draw(edit_editor, ShapeKind.RECT, (10, 10), (40, 40))
    return edit_editor, edit_editor.editing_hotspot


class TestScenarios:
    """End-to-end editing scenarios."""

    def test_create_named_rectangle(self, qapp):
        """Test profile creation, drawing, confirming and naming a rectangle."""
        store = Store()
        editor = ShapeEditor(store)

        editor.create_profile("Room A", "bg.png")
        editor.toggle_edit_mode()
        draw(editor, ShapeKind.RECT, (10, 10), (40, 40))
        editor.confirm()
        assert editor.state == EditorState.NAMING
        editor.submit_name("Desk", "notes/desk")

        assert len(store.profiles) == 1
        profile = store.profiles[0]
        assert profile.name == "Room A"
        assert profile.image_path == "bg.png"
        assert len(profile.hotspots) == 1
        hotspot = profile.hotspots[0]
        assert hotspot.points == [(10, 10), (40, 10), (40, 40), (10, 40)]
        assert hotspot.name == "Desk"
        assert hotspot.path == "notes/desk"
        assert editor.state == EditorState.EDIT_IDLE

    def test_cancel_ellipse_before_naming(self, edit_editor):
        """Test cancelling a freshly drawn ellipse removes it."""
        draw(edit_editor, ShapeKind.ELLIPSE, (0, 0), (20, 10))
        assert len(edit_editor.profile.hotspots) == 1

        edit_editor.cancel()

        assert len(edit_editor.profile.hotspots) == 0
        assert edit_editor.state == EditorState.EDIT_IDLE

    def test_delete_active_profile_promotes_other(self, editor):
        """Test deleting the active of two profiles selects the other."""
        first = editor.profile
        second = editor.create_profile("Room B")

        assert editor.delete_profile(second.id) is True
        assert editor.store.active_profile is first


class TestEditMode:
    """Tests for entering and leaving edit mode."""

    def test_toggle(self, editor, signal_recorder):
        """Test leaving edit mode persists and announces the save."""
        signal_recorder.watch("persist", editor.persist_requested)
        signal_recorder.watch("notice", editor.notice)

        editor.toggle_edit_mode()
        assert editor.state == EditorState.EDIT_IDLE
        editor.toggle_edit_mode()

        assert editor.state == EditorState.VIEW
        assert signal_recorder.count("persist") == 1
        assert signal_recorder.calls["notice"][-1] == ("Layout saved!",)

    def test_exit_drops_gesture(self, edit_editor):
        """Test leaving edit mode mid-drag detaches the gesture."""
        edit_editor.select_tool(ShapeKind.RECT)
        edit_editor.press_background((10, 10))
        gesture = edit_editor.gesture

        edit_editor.toggle_edit_mode()

        assert edit_editor.gesture is None
        assert gesture.active is False
        assert edit_editor.tool is None

    def test_view_click_navigates(self, editor, signal_recorder):
        """Test pressing a hotspot in view mode requests navigation."""
        hotspot = Hotspot(name="Desk", points=[(0, 0), (10, 0), (0, 10)])
        editor.profile.add_hotspot(hotspot)
        signal_recorder.watch("nav", editor.navigation_requested)

        editor.press_hotspot(hotspot.id, (2, 2))

        assert signal_recorder.calls["nav"] == [(hotspot,)]


class TestTools:
    """Tests for arming shape tools."""

    def test_select_and_toggle_off(self, edit_editor):
        """Test selecting the armed tool again disarms it."""
        assert edit_editor.select_tool(ShapeKind.RECT) is True
        assert edit_editor.state == EditorState.DRAWING

        edit_editor.select_tool(ShapeKind.RECT)

        assert edit_editor.tool is None
        assert edit_editor.state == EditorState.EDIT_IDLE

    def test_switch_tool(self, edit_editor):
        """Test selecting another tool replaces the armed one."""
        edit_editor.select_tool(ShapeKind.RECT)
        edit_editor.select_tool(ShapeKind.TRIANGLE)

        assert edit_editor.tool == ShapeKind.TRIANGLE
        assert edit_editor.state == EditorState.DRAWING

    def test_rejected_in_view(self, editor):
        """Test tools need edit mode."""
        assert editor.select_tool(ShapeKind.RECT) is False
        assert editor.tool is None

    def test_rejected_while_edge_editing(self, editing_rect):
        """Test tools are locked while a shape is being edited."""
        editor, _ = editing_rect
        assert editor.select_tool(ShapeKind.ELLIPSE) is False
        assert editor.state == EditorState.EDGE_EDITING


class TestDrawing:
    """Tests for draw gestures."""

    def test_preview_follows_pointer(self, edit_editor):
        """Test the preview updates while dragging."""
        edit_editor.select_tool(ShapeKind.RECT)
        edit_editor.press_background((10, 10))
        edit_editor.pointer_move((20, 30))

        assert isinstance(edit_editor.gesture, DrawGesture)
        assert edit_editor.preview == [(10, 10), (20, 10), (20, 30), (10, 30)]

    def test_commit_enters_edge_editing(self, editing_rect):
        """Test a finished draw is added and edited immediately."""
        editor, hotspot = editing_rect

        assert editor.state == EditorState.EDGE_EDITING
        assert editor.tool is None
        assert editor.gesture is None
        assert hotspot.shape_type == ShapeKind.RECT
        assert editor.undo_stack.count == 1

    def test_degenerate_draw(self, edit_editor):
        """Test a click without drag creates nothing and keeps the tool."""
        draw(edit_editor, ShapeKind.RECT, (10, 10), (11, 11))

        assert edit_editor.profile.hotspots == []
        assert edit_editor.state == EditorState.DRAWING
        assert edit_editor.tool == ShapeKind.RECT

    def test_press_on_shape_starts_draw(self, edit_editor):
        """Test shapes never intercept a press while drawing."""
        hotspot = Hotspot(points=[(0, 0), (50, 0), (0, 50)])
        edit_editor.profile.add_hotspot(hotspot)
        edit_editor.select_tool(ShapeKind.TRIANGLE)

        edit_editor.press_hotspot(hotspot.id, (5, 5))

        assert isinstance(edit_editor.gesture, DrawGesture)

    def test_draw_clamps_to_image(self, edit_editor):
        """Test drags outside the image are clamped."""
        draw(edit_editor, ShapeKind.RECT, (90, 90), (130, 120))

        hotspot = edit_editor.editing_hotspot
        assert hotspot.points == [(90, 90), (100, 90), (100, 100), (90, 100)]


class TestEdgeEditing:
    """Tests for vertex editing, undo, confirm and cancel."""

    def test_vertex_drag(self, editing_rect):
        """Test dragging a handle moves only that vertex."""
        editor, hotspot = editing_rect

        editor.press_handle(0, (10, 10))
        assert isinstance(editor.gesture, VertexDragGesture)
        editor.pointer_move((5, 5))
        editor.pointer_release((5, 6))

        assert hotspot.points == [(5, 6), (40, 10), (40, 40), (10, 40)]
        assert editor.gesture is None

    def test_translate(self, editing_rect):
        """Test dragging the shape body moves every vertex."""
        editor, hotspot = editing_rect

        editor.press_hotspot(hotspot.id, (20, 20))
        assert isinstance(editor.gesture, TranslateGesture)
        editor.pointer_release((25, 30))

        assert hotspot.points == [(15, 20), (45, 20), (45, 50), (15, 50)]

    def test_translate_stays_in_image(self, editing_rect):
        """Test the shape cannot be dragged past the image edge."""
        editor, hotspot = editing_rect

        editor.press_hotspot(hotspot.id, (20, 20))
        editor.pointer_release((100, 0))

        assert hotspot.points == [(70, 0), (100, 0), (100, 30), (70, 30)]

    def test_undo_converges_to_creation(self, editing_rect):
        """Test N drags give N+1 snapshots and undo returns to the start."""
        editor, hotspot = editing_rect
        created = list(hotspot.points)

        for target in [(5, 5), (6, 6), (7, 7)]:
            editor.press_handle(0, hotspot.points[0])
            editor.pointer_release(target)
        assert editor.undo_stack.count == 4

        assert editor.undo() is True
        assert hotspot.points[0] == (5, 5)
        assert editor.undo() is True
        assert hotspot.points == created
        assert editor.undo() is True
        assert hotspot.points == created

        assert editor.undo() is False
        assert hotspot.points == created

    def test_undo_after_two_drags(self, editing_rect):
        """Test one undo after two drags restores the snapshot beneath the top."""
        editor, hotspot = editing_rect

        editor.press_handle(0, (10, 10))
        editor.pointer_release((5, 5))
        editor.press_handle(2, (40, 40))
        editor.pointer_release((45, 45))

        editor.undo()

        assert hotspot.points == [(10, 10), (40, 10), (40, 40), (10, 40)]

    def test_undo_notices(self, editing_rect, signal_recorder):
        """Test undo reports what happened."""
        editor, hotspot = editing_rect
        signal_recorder.watch("notice", editor.notice)

        editor.undo()
        editor.press_handle(1, (40, 10))
        editor.pointer_release((45, 10))
        editor.undo()

        assert signal_recorder.calls["notice"] == [("Nothing to undo",), ("Undo!",)]

    def test_cancel_deletes(self, editing_rect, signal_recorder):
        """Test cancel removes the shape being edited."""
        editor, hotspot = editing_rect
        signal_recorder.watch("persist", editor.persist_requested)

        editor.cancel()

        assert editor.profile.find_hotspot(hotspot.id) is None
        assert editor.editing_id is None
        assert signal_recorder.count("persist") == 1

    def test_delete_mid_edit(self, editing_rect):
        """Test deleting the edited hotspot ends edge editing."""
        editor, hotspot = editing_rect

        assert editor.delete_hotspot(hotspot.id) is True

        assert editor.profile.hotspots == []
        assert editor.state == EditorState.EDIT_IDLE

    def test_confirm_named_hotspot(self, edit_editor):
        """Test confirming an already named hotspot skips naming."""
        hotspot = Hotspot(name="Desk", points=[(0, 0), (10, 0), (10, 10), (0, 10)])
        edit_editor.profile.add_hotspot(hotspot)
        assert edit_editor.begin_edge_editing(hotspot.id) is True

        edit_editor.confirm()

        assert edit_editor.state == EditorState.EDIT_IDLE
        assert edit_editor.undo_stack.count == 0

    def test_close_detaches_gesture(self, editing_rect):
        """Test teardown mid-drag leaves no gesture behind."""
        editor, hotspot = editing_rect
        editor.press_handle(2, (40, 40))
        gesture = editor.gesture

        editor.close()

        assert editor.gesture is None
        assert gesture.active is False


class TestNaming:
    """Tests for naming a new hotspot."""

    @pytest.fixture
    def naming(self, editing_rect, signal_recorder):
        editor, hotspot = editing_rect
        signal_recorder.watch("naming", editor.naming_requested)
        editor.confirm()
        return editor, hotspot

    def test_naming_requested(self, naming, signal_recorder):
        """Test confirming an unnamed shape asks for a name."""
        editor, hotspot = naming

        assert editor.state == EditorState.NAMING
        assert signal_recorder.calls["naming"] == [(hotspot,)]

    def test_empty_name_rejected(self, naming):
        """Test whitespace-only names are refused."""
        editor, hotspot = naming

        assert editor.submit_name("   ", "x") is False
        assert editor.state == EditorState.NAMING

    def test_submit_strips(self, naming):
        """Test name and path are trimmed."""
        editor, hotspot = naming

        editor.submit_name("  Desk ", " notes/desk ")

        assert hotspot.name == "Desk"
        assert hotspot.path == "notes/desk"
        assert editor.selected_id == hotspot.id

    def test_cancel_naming_discards(self, naming):
        """Test cancelling the name dialog deletes the shape."""
        editor, hotspot = naming

        editor.cancel_naming()

        assert editor.profile.hotspots == []
        assert editor.state == EditorState.EDIT_IDLE


class TestActionMenu:
    """Tests for edit-mode hotspot actions."""

    @pytest.fixture
    def idle_hotspot(self, edit_editor):
        hotspot = Hotspot(name="Shelf", path="Books", points=[(0, 0), (10, 0), (0, 10)])
        edit_editor.profile.add_hotspot(hotspot)
        return edit_editor, hotspot

    def test_press_selects_and_opens_menu(self, idle_hotspot, signal_recorder):
        """Test pressing a hotspot in edit mode selects it."""
        editor, hotspot = idle_hotspot
        signal_recorder.watch("menu", editor.action_menu_requested)

        editor.press_hotspot(hotspot.id, (1, 1))

        assert editor.selected_id == hotspot.id
        assert signal_recorder.calls["menu"] == [(hotspot,)]

    def test_background_deselects(self, idle_hotspot):
        """Test pressing empty space clears the selection."""
        editor, hotspot = idle_hotspot
        editor.press_hotspot(hotspot.id, (1, 1))

        editor.press_background((80, 80))

        assert editor.selected_id is None

    def test_rename(self, idle_hotspot):
        """Test editing the name and link."""
        editor, hotspot = idle_hotspot

        assert editor.rename_hotspot(hotspot.id, "Bookshelf", "Library") is True
        assert (hotspot.name, hotspot.path) == ("Bookshelf", "Library")
        assert editor.rename_hotspot(hotspot.id, "", "x") is False

    def test_delete(self, idle_hotspot, signal_recorder):
        """Test deleting reports the removed region."""
        editor, hotspot = idle_hotspot
        signal_recorder.watch("notice", editor.notice)

        assert editor.delete_hotspot(hotspot.id) is True
        assert editor.profile.hotspots == []
        assert signal_recorder.calls["notice"] == [("Deleted: Shelf",)]


class TestProfiles:
    """Tests for profile operations through the editor."""

    def test_select_rejected_in_edit_mode(self, editor):
        """Test profiles cannot be switched while editing."""
        first = editor.profile
        second = editor.create_profile("Room B")
        editor.toggle_edit_mode()

        assert editor.select_profile(first.id) is False
        assert editor.store.active_profile is second

    def test_select(self, editor):
        """Test switching profiles in view mode."""
        first = editor.profile
        editor.create_profile("Room B")

        assert editor.select_profile(first.id) is True
        assert editor.profile is first

    def test_label_type(self, editor, signal_recorder):
        """Test changing the label style persists."""
        signal_recorder.watch("persist", editor.persist_requested)

        editor.set_label_type(LabelType.BOTH)

        assert editor.store.display_label_type == LabelType.BOTH
        assert signal_recorder.count("persist") == 1

    def test_create_rejected_in_edit_mode(self, edit_editor):
        """Test adding a profile mid-draw keeps the active profile."""
        active = edit_editor.profile
        edit_editor.profile.add_hotspot(
            Hotspot(name="Desk", points=[(0, 0), (10, 0), (0, 10)])
        )
        edit_editor.select_tool(ShapeKind.RECT)

        assert edit_editor.create_profile("Room B") is None
        assert edit_editor.store.active_profile is active
        assert len(edit_editor.store.profiles) == 1
        assert edit_editor.state == EditorState.DRAWING

    def test_update_profile(self, editor, signal_recorder):
        """Test renaming a profile and changing its image persists."""
        signal_recorder.watch("persist", editor.persist_requested)
        profile = editor.profile

        assert editor.update_profile(profile.id, " Den ", "rooms/den.jpg") is True

        assert profile.name == "Den"
        assert profile.image_path == "rooms/den.jpg"
        assert signal_recorder.count("persist") == 1

    def test_update_profile_blank_image(self, editor):
        """Test a blank image reference falls back to the default image."""
        profile = editor.profile
        editor.update_profile(profile.id, "Den", "  ")

        assert profile.image_path == "room-bg.png"

    def test_update_profile_rejects_empty_name(self, editor):
        """Test a profile keeps its name when the new one is blank."""
        profile = editor.profile

        assert editor.update_profile(profile.id, "", "x.png") is False
        assert editor.update_profile("missing", "Den", "x.png") is False
        assert profile.name == "Room A"
        assert profile.image_path == "bg.png"
