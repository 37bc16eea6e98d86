import unittest

from farmstay.db import DbError, PostgresDbClient, UnknownFieldError, UnknownTableError


class PostgresDbClientTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the Postgres client logic.
    """

    def setUp(self):
        self.db = PostgresDbClient("sqlite+pysqlite:///:memory:")

    def test_insert_applies_column_defaults(self):
        enquiry = self.db.insert(
            "stay_enquiries",
            {"name": "Asha", "phone": "1", "checkin": "2026-12-24", "checkout": "2026-12-26"},
        )
        self.assertEqual(enquiry["status"], "new")
        self.assertEqual(enquiry["source"], "direct")
        self.assertEqual(enquiry["guests"], 1)
        self.assertIsNotNone(enquiry["id"])
        self.assertIsNotNone(enquiry["created_at"])

    def test_select_filters_orders_and_limits(self):
        for sort_order, text in ((3, "c"), (1, "a"), (2, "b")):
            self.db.insert("house_rules", {"sort_order": sort_order, "rule_text": text})
        rows = self.db.select("house_rules", order_by="sort_order")
        self.assertEqual([r["rule_text"] for r in rows], ["a", "b", "c"])

        rows = self.db.select("house_rules", order_by="sort_order", descending=True, limit=1)
        self.assertEqual([r["rule_text"] for r in rows], ["c"])

        rows = self.db.select("house_rules", filters={"rule_text": "b"})
        self.assertEqual(len(rows), 1)

    def test_update_and_delete(self):
        faq = self.db.insert("faqs", {"question": "Pets?", "answer": "Yes"})
        updated = self.db.update("faqs", faq["id"], {"answer": "Small ones"})
        self.assertEqual(updated["answer"], "Small ones")
        self.assertIsNone(self.db.update("faqs", 999, {"answer": "x"}))

        self.assertTrue(self.db.delete("faqs", faq["id"]))
        self.assertFalse(self.db.delete("faqs", faq["id"]))
        self.assertIsNone(self.db.get("faqs", faq["id"]))

    def test_upsert_site_settings(self):
        self.db.upsert("site_settings", {"id": 1, "brand_name": "Pine Hollow"})
        self.db.upsert("site_settings", {"id": 1, "tagline": "Quiet"})
        record = self.db.get("site_settings", 1)
        self.assertEqual(record["brand_name"], "Pine Hollow")
        self.assertEqual(record["tagline"], "Quiet")
        self.assertEqual(len(self.db.select("site_settings")), 1)

    def test_json_items_roundtrip(self):
        group = self.db.insert("amenity_groups", {"title": "Pool", "items": ["Towels", "Loungers"]})
        self.assertEqual(self.db.get("amenity_groups", group["id"])["items"], ["Towels", "Loungers"])

    def test_admin_users_keyed_by_email(self):
        self.db.insert("admin_users", {"email": "owner@example.com"})
        rows = self.db.select("admin_users", filters={"email": "owner@example.com"}, limit=1)
        self.assertEqual(len(rows), 1)
        with self.assertRaises(DbError):
            self.db.insert("admin_users", {"email": "owner@example.com"})

    def test_unknown_table_and_field(self):
        with self.assertRaises(UnknownTableError):
            self.db.select("bookings")
        with self.assertRaises(UnknownFieldError):
            self.db.insert("faqs", {"question": "Q", "answer": "A", "votes": 3})
        with self.assertRaises(UnknownFieldError):
            self.db.select("faqs", order_by="votes")


if __name__ == "__main__":
    unittest.main()
