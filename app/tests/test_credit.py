import unittest
from datetime import datetime, timedelta, timezone

from core.error.exceptions import InvalidInputException
from core.members.credit import (CreditOperation, combine_deposit_datetime,
                                 to_iso_utc)

ICT = timezone(timedelta(hours=7))


class TestDepositDatetime(unittest.TestCase):
    def test_combines_in_given_zone(self):
        moment = combine_deposit_datetime("2024-01-15", "14:30", ICT)
        self.assertEqual(moment, datetime(2024, 1, 15, 14, 30, tzinfo=ICT))
        self.assertEqual(to_iso_utc(moment), "2024-01-15T07:30:00.000Z")

    def test_seconds_are_accepted(self):
        moment = combine_deposit_datetime("2024-01-15", "00:05:09", ICT)
        self.assertEqual(to_iso_utc(moment), "2024-01-14T17:05:09.000Z")

    def test_local_time_when_no_zone(self):
        moment = combine_deposit_datetime("2024-06-01", "08:00")
        self.assertIsNotNone(moment.tzinfo)
        self.assertEqual(moment, datetime(2024, 6, 1, 8, 0).astimezone())

    def test_invalid_fields(self):
        cases = [
            ("", "14:30", "date_deposit"),
            ("2024-13-01", "14:30", "date_deposit"),
            ("2024-01-15", "", "time_deposit"),
            ("2024-01-15", "25:00", "time_deposit"),
        ]
        for date_deposit, time_deposit, field in cases:
            with self.subTest(date=date_deposit, time=time_deposit):
                with self.assertRaises(InvalidInputException) as ctx:
                    combine_deposit_datetime(date_deposit, time_deposit, ICT)
                self.assertEqual(ctx.exception.field, field)

    def test_iso_utc_keeps_milliseconds(self):
        moment = datetime(2024, 1, 15, 7, 30, 0, 123456, tzinfo=timezone.utc)
        self.assertEqual(to_iso_utc(moment), "2024-01-15T07:30:00.123Z")


class TestCreditOperation(unittest.TestCase):
    def test_values(self):
        self.assertEqual(CreditOperation("deposit"), CreditOperation.DEPOSIT)
        self.assertEqual([op.value for op in CreditOperation], ["add", "remove", "cashout", "deposit"])


if __name__ == '__main__':
    unittest.main()
