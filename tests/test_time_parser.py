# remindbot - Discord Reminder Bot
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

"""Tests for reminder time expression parsing."""

import sys
from datetime import datetime
from pathlib import Path

import pytest
import pytz

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reminders.time_parser import (
    MAX_CONTENT_LENGTH,
    RemindmeKind,
    TimeParseError,
    add_relative,
    check_content_length,
    parse_absolute,
    parse_recurring,
    parse_relative,
    parse_remindme_command,
    rewrite_to_second_person,
)

WARSAW = pytz.timezone("Europe/Warsaw")
NEW_YORK = pytz.timezone("America/New_York")
TOKYO = pytz.timezone("Asia/Tokyo")

# Noon in Warsaw (CEST, UTC+2)
NOW = datetime(2024, 6, 15, 10, 0, tzinfo=pytz.UTC)


class TestParseRemindmeCommand:
    """Test matching of the three !remindme syntaxes."""

    def test_absolute_with_zone_and_year(self):
        args = parse_remindme_command(
            "on 23.12.2024 at 12:30 PM America/New_York that Christmas is tomorrow"
        )
        assert args.kind is RemindmeKind.ABSOLUTE
        assert (args.day, args.month, args.year) == (23, 12, 2024)
        assert (args.hour, args.minute, args.period) == (12, 30, "PM")
        assert args.zone == "America/New_York"
        assert args.content == "that Christmas is tomorrow"

    def test_absolute_defaults(self):
        args = parse_remindme_command("on 1.2 at 9 AM buy milk")
        assert args.kind is RemindmeKind.ABSOLUTE
        assert args.year is None
        assert args.minute == 0
        assert args.zone is None
        assert args.content == "buy milk"

    def test_absolute_three_part_zone(self):
        args = parse_remindme_command("on 1.2 at 9 AM America/Argentina/Buenos_Aires call mom")
        assert args.zone == "America/Argentina/Buenos_Aires"
        assert args.content == "call mom"

    def test_relative_numeric(self):
        args = parse_remindme_command("in 2 days to buy a gift for Aurora")
        assert args.kind is RemindmeKind.RELATIVE
        assert args.quantity == 2
        assert args.unit == "days"
        assert args.content == "to buy a gift for Aurora"

    @pytest.mark.parametrize("word", ["a", "an"])
    def test_relative_article_means_one(self, word):
        args = parse_remindme_command(f"in {word} hour to stretch")
        assert args.quantity == 1
        assert args.unit == "hour"

    def test_recurring(self):
        args = parse_remindme_command("every day at 8:05 AM Europe/London to take my pills")
        assert args.kind is RemindmeKind.RECURRING
        assert (args.hour, args.minute, args.period) == (8, 5, "AM")
        assert args.zone == "Europe/London"
        assert args.content == "to take my pills"

    def test_multiline_content_kept(self):
        args = parse_remindme_command("in 5 minutes to check:\n- the oven\n- the door")
        assert args.content == "to check:\n- the oven\n- the door"

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "tomorrow at 10am",
            "on 1.2 at 9 buy milk",
            "in 2 years to retire",
            "in 100 days to celebrate",
            "every week at 9 AM to clean",
        ],
    )
    def test_unrecognized_syntax(self, text):
        assert parse_remindme_command(text) is None


class TestTextRewrite:
    """Test first-person to second-person rewriting."""

    def test_rewrite(self):
        assert rewrite_to_second_person("remind my team") == "remind your team"

    def test_rewrite_all_occurrences(self):
        assert rewrite_to_second_person("to feed my cat and my dog") == "to feed your cat and your dog"

    def test_no_partial_words(self):
        assert rewrite_to_second_person("to call myself") == "to call myself"


class TestContentLength:
    """Test the reminder text length limit."""

    def test_at_limit_accepted(self):
        check_content_length("x" * MAX_CONTENT_LENGTH)

    def test_over_limit_rejected(self):
        with pytest.raises(TimeParseError, match="1500 characters"):
            check_content_length("x" * (MAX_CONTENT_LENGTH + 1))


class TestParseAbsolute:
    """Test absolute reminders."""

    def test_converts_local_time_to_utc(self):
        args = parse_remindme_command("on 20.6 at 3 PM buy my milk")
        parsed = parse_absolute(args, WARSAW, now=NOW)

        assert parsed.next_execution == datetime(2024, 6, 20, 13, 0, tzinfo=pytz.UTC)
        assert parsed.is_recurring is False
        assert parsed.timezone == "Europe/Warsaw"
        assert parsed.content == "buy your milk"

    def test_midnight_am(self):
        args = parse_remindme_command("on 1.1.2025 at 12 AM America/New_York happy new year")
        parsed = parse_absolute(args, NEW_YORK, now=NOW)
        assert parsed.next_execution == datetime(2025, 1, 1, 5, 0, tzinfo=pytz.UTC)

    def test_default_year_from_resolved_zone(self):
        # Still 2024 in UTC, already 2025 in Tokyo
        now = datetime(2024, 12, 31, 23, 30, tzinfo=pytz.UTC)
        args = parse_remindme_command("on 1.1 at 10 AM Asia/Tokyo visit the shrine")
        parsed = parse_absolute(args, TOKYO, now=now)
        assert parsed.next_execution == datetime(2025, 1, 1, 1, 0, tzinfo=pytz.UTC)

    def test_past_date_rejected(self):
        args = parse_remindme_command("on 15.6 at 9 AM too late")
        with pytest.raises(TimeParseError, match="cannot be in the past"):
            parse_absolute(args, WARSAW, now=NOW)

    def test_invalid_calendar_rejected(self):
        args = parse_remindme_command("on 31.6 at 9 AM no such day")
        with pytest.raises(TimeParseError, match="There aren't 31 days in this month."):
            parse_absolute(args, WARSAW, now=NOW)

    def test_year_out_of_window_rejected(self):
        args = parse_remindme_command("on 1.1.2026 at 9 AM far away")
        with pytest.raises(TimeParseError, match="2024 or 2025"):
            parse_absolute(args, WARSAW, now=NOW)

    def test_hour_out_of_range_rejected(self):
        args = parse_remindme_command("on 20.6 at 13 PM nonsense")
        with pytest.raises(TimeParseError, match="12-hour clock"):
            parse_absolute(args, WARSAW, now=NOW)


class TestParseRelative:
    """Test relative reminders."""

    def test_minutes_and_hours(self):
        assert add_relative(NOW, 30, "minutes") == datetime(2024, 6, 15, 10, 30, tzinfo=pytz.UTC)
        assert add_relative(NOW, 2, "hours") == datetime(2024, 6, 15, 12, 0, tzinfo=pytz.UTC)

    def test_weeks_are_seven_days(self):
        assert add_relative(NOW, 2, "weeks") == datetime(2024, 6, 29, 10, 0, tzinfo=pytz.UTC)

    def test_month_keeps_day_of_month(self):
        assert add_relative(NOW, 2, "months") == datetime(2024, 8, 15, 10, 0, tzinfo=pytz.UTC)

    @pytest.mark.parametrize(
        "start, months, expected",
        [
            (datetime(2024, 1, 31, 10, 0, tzinfo=pytz.UTC), 1, datetime(2024, 3, 2, 10, 0, tzinfo=pytz.UTC)),
            (datetime(2023, 1, 31, 10, 0, tzinfo=pytz.UTC), 1, datetime(2023, 3, 3, 10, 0, tzinfo=pytz.UTC)),
            (datetime(2024, 3, 31, 10, 0, tzinfo=pytz.UTC), 1, datetime(2024, 5, 1, 10, 0, tzinfo=pytz.UTC)),
            (datetime(2024, 12, 31, 10, 0, tzinfo=pytz.UTC), 2, datetime(2025, 3, 3, 10, 0, tzinfo=pytz.UTC)),
        ],
    )
    def test_month_overflow_rolls_into_next_month(self, start, months, expected):
        assert add_relative(start, months, "months") == expected

    def test_a_day_equals_one_day(self):
        one = parse_relative(parse_remindme_command("in 1 day stretch"), now=NOW)
        article = parse_relative(parse_remindme_command("in a day stretch"), now=NOW)
        assert one.next_execution == article.next_execution
        assert one.next_execution == datetime(2024, 6, 16, 10, 0, tzinfo=pytz.UTC)

    def test_result_is_one_shot_and_rewritten(self):
        parsed = parse_relative(parse_remindme_command("in 3 days to remind my team"), now=NOW)
        assert parsed.is_recurring is False
        assert parsed.timezone is None
        assert parsed.content == "to remind your team"

    def test_unknown_unit(self):
        with pytest.raises(TimeParseError):
            add_relative(NOW, 1, "fortnight")


class TestParseRecurring:
    """Test daily recurring reminders."""

    def test_later_today(self):
        args = parse_remindme_command("every day at 3 PM to walk the dog")
        parsed = parse_recurring(args, WARSAW, now=NOW)

        assert parsed.next_execution == datetime(2024, 6, 15, 13, 0, tzinfo=pytz.UTC)
        assert parsed.is_recurring is True
        assert parsed.timezone == "Europe/Warsaw"

    def test_already_passed_today_rolls_to_tomorrow(self):
        args = parse_remindme_command("every day at 9 AM to take my pills")
        parsed = parse_recurring(args, WARSAW, now=NOW)

        assert parsed.next_execution == datetime(2024, 6, 16, 7, 0, tzinfo=pytz.UTC)
        assert parsed.local_time.day == 16
        assert parsed.content == "to take your pills"

    def test_invalid_hour_rejected(self):
        args = parse_remindme_command("every day at 13 PM nonsense")
        with pytest.raises(TimeParseError, match="12-hour clock"):
            parse_recurring(args, WARSAW, now=NOW)

    def test_invalid_minute_rejected(self):
        args = parse_remindme_command("every day at 9:75 AM nonsense")
        with pytest.raises(TimeParseError, match="understand the clock"):
            parse_recurring(args, WARSAW, now=NOW)
