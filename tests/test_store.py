# reminderbot - Discord Reminder Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""Tests for the ordered reminder store."""

import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest
import pytz

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reminders.reminder import Reminder
from reminders.store import ReminderIndexError, ReminderStore

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=pytz.UTC)


def make(conversation_id="foo", offset=0, action="stretch", reminder_id=None):
    return Reminder(
        id=reminder_id,
        conversation_id=conversation_id,
        due_at=NOW + timedelta(seconds=offset),
        due_time_text="",
        action=action,
        is_infinitive=False,
    )


class TestInsert:
    """Test ordered insertion."""

    def test_insert_into_empty_store(self):
        store = ReminderStore()
        stored = store.insert(make(reminder_id="123"))
        assert list(store) == [stored]
        assert stored.id == "123"

    def test_assigns_id(self):
        store = ReminderStore()
        stored = store.insert(make())
        assert stored.id
        assert list(store)[0].id == stored.id

    def test_keeps_due_order(self):
        store = ReminderStore()
        rng = random.Random(42)
        for _ in range(20):
            store.insert(make(offset=rng.randint(0, 3_153_600)))

        due = [r.due_at for r in store]
        assert due == sorted(due)

    def test_equal_due_keeps_insertion_order(self):
        store = ReminderStore()
        first = store.insert(make(action="first"))
        second = store.insert(make(action="second"))
        store.insert(make(offset=-10, action="earlier"))
        assert [r.action for r in store] == ["earlier", "first", "second"]
        assert list(store)[1:] == [first, second]

    def test_duplicate_id_raises(self):
        store = ReminderStore([make(reminder_id="abc")])
        with pytest.raises(ValueError):
            store.insert(make(offset=5, reminder_id="abc"))
        assert len(store) == 1


class TestExtractDue:
    """Test removal of due reminders."""

    def test_empty_store(self):
        assert ReminderStore().extract_due(NOW) == []

    def test_returns_due_and_keeps_future(self):
        store = ReminderStore([make(offset=-5), make(offset=-4), make(offset=2)])
        due = store.extract_due(NOW)
        assert [r.due_at for r in due] == [
            NOW - timedelta(seconds=5),
            NOW - timedelta(seconds=4),
        ]
        assert [r.due_at for r in store] == [NOW + timedelta(seconds=2)]
        assert store.extract_due(NOW) == []

    def test_all_due(self):
        past = [make(offset=-5), make(offset=-4), make(offset=-3), make(offset=-2)]
        store = ReminderStore(past)
        assert [r.due_at for r in store.extract_due(NOW)] == [r.due_at for r in past]
        assert len(store) == 0

    def test_due_exactly_now_is_due(self):
        store = ReminderStore([make(offset=0), make(offset=1)])
        assert len(store.extract_due(NOW)) == 1
        assert len(store) == 1

    def test_none_due(self):
        store = ReminderStore([make(offset=2), make(offset=3)])
        assert store.extract_due(NOW) == []
        assert len(store) == 2


class TestConversationViews:
    """Test per-conversation listing and removal."""

    def _interleaved(self):
        ids = [
            ("foo", "100"), ("bar", "101"), ("baz", "102"),
            ("foo", "103"), ("bar", "104"), ("baz", "125"),
            ("foo", "126"), ("bar", "127"), ("baz", "128"),
            ("foo", "109"),
        ]
        return ReminderStore(
            make(conversation_id=conv, offset=i, reminder_id=rid)
            for i, (conv, rid) in enumerate(ids)
        )

    def test_list_for(self):
        store = self._interleaved()
        assert [r.id for r in store.list_for("foo")] == ["100", "103", "126", "109"]

    def test_list_for_unknown_conversation(self):
        assert self._interleaved().list_for("bbq") == []
        assert ReminderStore().list_for("bbq") == []

    def test_remove_nth(self):
        store = self._interleaved()
        removed = store.remove_nth("foo", 2)
        assert removed.id == "126"
        assert removed.conversation_id == "foo"
        assert len(store) == 9
        assert [r.id for r in store.list_for("foo")] == ["100", "103", "109"]

    @pytest.mark.parametrize("index", [-1, 4, 100])
    def test_remove_nth_out_of_range(self, index):
        store = self._interleaved()
        with pytest.raises(ReminderIndexError):
            store.remove_nth("foo", index)
        assert len(store) == 10

    def test_remove_by_id(self):
        store = self._interleaved()
        removed = store.remove_by_id("125")
        assert removed.id == "125"
        assert all(r.id != "125" for r in store)

    def test_remove_by_unknown_id(self):
        assert self._interleaved().remove_by_id("abc") is None


class TestSnapshot:
    """Test snapshot/restore."""

    def test_round_trip(self):
        store = ReminderStore(
            [make(offset=30, reminder_id="b"), make("bar", offset=10, reminder_id="a")]
        )
        restored = ReminderStore()
        restored.restore(store.snapshot())
        assert list(restored) == list(store)

    def test_snapshot_shape(self):
        store = ReminderStore([make(reminder_id="a")])
        snapshot = store.snapshot()
        assert list(snapshot) == ["reminders"]
        assert snapshot["reminders"][0]["id"] == "a"

    def test_restore_replaces_contents(self):
        store = ReminderStore([make(reminder_id="old")])
        store.restore({"reminders": [make(reminder_id="new").to_dict()]})
        assert [r.id for r in store] == ["new"]

    def test_restore_sorts_unordered_data(self):
        data = {
            "reminders": [
                make(offset=20, reminder_id="late").to_dict(),
                make(offset=10, reminder_id="early").to_dict(),
            ]
        }
        store = ReminderStore()
        store.restore(data)
        assert [r.id for r in store] == ["early", "late"]

    def test_bad_restore_leaves_store_untouched(self):
        store = ReminderStore([make(reminder_id="keep")])
        with pytest.raises(KeyError):
            store.restore({"reminders": [{"id": "broken"}]})
        assert [r.id for r in store] == ["keep"]

    def test_restore_empty(self):
        store = ReminderStore([make()])
        store.restore({})
        assert len(store) == 0
