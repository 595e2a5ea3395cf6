import pytest
from clearcache.model.session import DesktopSession, instance_slot, resolve_action
from clearcache.model.windows import ContentKind, Geometry, Viewport


def kinds(session: DesktopSession) -> list[ContentKind]:
    return [record.content_kind for record in session.records]


class TestResolveAction:

    @pytest.mark.parametrize("action, kind", [
        ("new-entry", ContentKind.COMPOSER),
        ("journal-folder", ContentKind.LISTING),
        ("journal-calendar", ContentKind.CALENDAR),
        ("streaks", ContentKind.STREAKS),
        ("settings", ContentKind.SETTINGS),
        ("scanline-settings", ContentKind.SCANLINE_SETTINGS),
        ("welcome", ContentKind.WELCOME),
    ])
    def test_known_actions(self, action, kind):
        assert resolve_action(action) == (kind, None)

    def test_open_entry_carries_the_id(self):
        assert resolve_action("open-entry:abc") == (ContentKind.DETAIL, "abc")

    def test_open_entry_without_id_is_unknown(self):
        assert resolve_action("open-entry:") is None

    def test_unknown_action(self):
        assert resolve_action("format-disk") is None

    def test_composer_and_detail_share_a_slot(self):
        assert instance_slot(ContentKind.COMPOSER) == instance_slot(ContentKind.DETAIL)
        assert instance_slot(ContentKind.LISTING) != instance_slot(ContentKind.CALENDAR)


class TestDispatch:

    def test_new_entry_twice_focuses_the_same_window(self, session):
        first = session.dispatch_action("new-entry")
        second = session.dispatch_action("new-entry")
        assert first.id == second.id
        assert len(session) == 1

    @pytest.mark.parametrize("action", ["journal-folder", "journal-calendar", "streaks", "settings", "welcome"])
    def test_single_instance_kinds(self, session, action):
        for _ in range(3):
            session.dispatch_action(action)
        assert len(session) == 1

    def test_repeated_dispatch_raises_the_window(self, session):
        folder = session.dispatch_action("journal-folder")
        session.dispatch_action("streaks")
        session.dispatch_action("journal-folder")
        assert session.top().id == folder.id

    def test_unknown_action_opens_nothing(self, session):
        assert session.dispatch_action("nope") is None
        assert len(session) == 0

    def test_new_window_gets_default_title_and_presentation(self, session):
        record = session.dispatch_action("journal-folder")
        assert record.title == "Journal Folder"
        assert record.padding_mode == "padded"
        assert record.show_info_bar is True

    def test_geometry_param_is_used(self, session):
        geometry = Geometry(10, 40, 400, 300)
        record = session.dispatch_action("streaks", {"geometry": geometry})
        assert record.geometry_hint == geometry

    def test_new_windows_cascade(self, session):
        first = session.dispatch_action("journal-folder")
        second = session.dispatch_action("streaks")
        assert (first.geometry_hint.x, first.geometry_hint.y) == (100, 80)
        assert (second.geometry_hint.x, second.geometry_hint.y) == (130, 110)

    def test_cascade_stays_inside_the_viewport(self):
        session = DesktopSession(Viewport(100, 30, 1), cascade_step=40, origin=(10, 3))
        session.dispatch_action("journal-folder")
        record = session.dispatch_action("streaks")
        g = record.geometry_hint
        assert g.x + g.width <= 100
        assert g.y + g.height <= 30
        assert g.y >= 1

    def test_open_entry_opens_a_detail_window(self, session):
        record = session.dispatch_action("open-entry:e1", {"title": "Hello"})
        assert record.content_kind is ContentKind.DETAIL
        assert record.associated_entry_id == "e1"
        assert record.title == "Hello"

    def test_open_other_entry_retargets_the_editor(self, session):
        record = session.dispatch_action("open-entry:e1")
        geometry = record.geometry_hint
        again = session.dispatch_action("open-entry:e2", {"title": "Second"})
        assert again.id == record.id
        assert again.associated_entry_id == "e2"
        assert again.title == "Second"
        assert again.geometry_hint == geometry
        assert len(session) == 1

    def test_new_entry_on_an_open_detail_becomes_a_blank_composer(self, session):
        detail = session.dispatch_action("open-entry:e1")
        composer = session.dispatch_action("new-entry")
        assert composer.id == detail.id
        assert composer.content_kind is ContentKind.COMPOSER
        assert composer.associated_entry_id is None
        assert composer.title == "New Entry"

    def test_open_entry_on_a_composer_retargets_it(self, session):
        composer = session.dispatch_action("new-entry")
        detail = session.dispatch_action("open-entry:e9")
        assert detail.id == composer.id
        assert detail.content_kind is ContentKind.DETAIL


class TestFocusAndClose:

    def test_focus_gives_the_highest_z(self, session):
        records = [session.dispatch_action(a) for a in ("journal-folder", "streaks", "settings")]
        session.focus(records[0].id)
        others = [r.z_order for r in session.records if r.id != records[0].id]
        assert records[0].z_order > max(others)
        assert session.top().id == records[0].id

    def test_z_order_never_repeats(self, session):
        folder = session.dispatch_action("journal-folder")
        streaks = session.dispatch_action("streaks")
        seen = {folder.z_order, streaks.z_order}
        for _ in range(5):
            session.focus(folder.id)
            session.focus(streaks.id)
            seen.update({folder.z_order, streaks.z_order})
        assert len(seen) == 12

    def test_stale_ids_are_no_ops(self, session):
        session.dispatch_action("journal-folder")
        assert session.focus("missing") is None
        assert session.close("missing") is None
        assert session.update_title("missing", "x") is None
        assert session.promote_composer_to_detail("missing", "e1") is None
        assert len(session) == 1

    def test_close_removes_the_record(self, session):
        record = session.dispatch_action("journal-folder")
        assert session.close(record.id) is record
        assert record.id not in session
        assert session.top() is None

    def test_cycle_focus_forward_raises_the_bottom_window(self, session):
        folder = session.dispatch_action("journal-folder")
        session.dispatch_action("streaks")
        session.dispatch_action("settings")
        session.cycle_focus(1)
        assert session.top().id == folder.id

    def test_cycle_focus_backward_swaps_the_top_two(self, session):
        session.dispatch_action("journal-folder")
        streaks = session.dispatch_action("streaks")
        session.dispatch_action("settings")
        session.cycle_focus(-1)
        assert session.top().id == streaks.id

    def test_cycle_focus_with_one_window(self, session):
        only = session.dispatch_action("journal-folder")
        assert session.cycle_focus(1) is only


class TestEntryLifecycle:

    def test_promote_keeps_id_and_geometry(self, session):
        composer = session.dispatch_action("new-entry")
        geometry = composer.geometry_hint
        promoted = session.promote_composer_to_detail(composer.id, "e1", "My Day")
        assert promoted.id == composer.id
        assert promoted.content_kind is ContentKind.DETAIL
        assert promoted.associated_entry_id == "e1"
        assert promoted.title == "My Day"
        assert promoted.geometry_hint == geometry

    def test_promote_only_applies_to_composers(self, session):
        folder = session.dispatch_action("journal-folder")
        assert session.promote_composer_to_detail(folder.id, "e1") is None
        assert folder.content_kind is ContentKind.LISTING

    def test_entry_changes_refresh_dependent_windows(self, session):
        folder = session.dispatch_action("journal-folder")
        calendar = session.dispatch_action("journal-calendar")
        session.dispatch_action("settings")
        session.entry_changed("e1")
        assert sorted(session.drain_refreshes()) == sorted([folder.id, calendar.id])
        assert session.drain_refreshes() == []

    def test_title_update_refreshes_listing(self, session):
        folder = session.dispatch_action("journal-folder")
        detail = session.dispatch_action("open-entry:e1")
        session.update_title(detail.id, "Renamed")
        assert detail.title == "Renamed"
        assert session.drain_refreshes() == [folder.id]

    def test_entry_deleted_closes_and_refreshes(self, session):
        folder = session.dispatch_action("journal-folder")
        detail = session.dispatch_action("open-entry:e1")
        session.entry_deleted(detail.id)
        assert detail.id not in session
        assert session.drain_refreshes() == [folder.id]

    def test_closing_an_unbound_window_does_not_refresh(self, session):
        session.dispatch_action("journal-folder")
        settings = session.dispatch_action("settings")
        session.close(settings.id)
        assert session.drain_refreshes() == []
