"""Tests for the stores and the snapshot codec."""

import json
from decimal import Decimal

import pytest

from taka_tracker.models import (
    CategoryBudget,
    Language,
    NotificationPreferences,
    Preferences,
    Theme,
    Transaction,
)
from taka_tracker.services.storage import (
    CorruptDataError,
    InMemoryStore,
    JsonFileStore,
    StorageWriteError,
    StoreKey,
)
from taka_tracker.services.storage.codec import (
    decode_budgets,
    decode_notifications,
    decode_preferences,
    decode_transactions,
    encode_budgets,
    encode_notifications,
    encode_transactions,
)


class TestCodec:
    """Tests for encoding and decoding snapshots."""

    def test_transactions_survive_a_round_trip(self, make_draft):
        transactions = [
            Transaction.from_draft("2", make_draft(amount="1500.50", note="বাজার, সবজি")),
            Transaction.from_draft("1", make_draft(amount="20000", type="income", category="salary")),
        ]
        assert decode_transactions(encode_transactions(transactions)) == transactions

    def test_transactions_json_layout(self, make_draft):
        """Test stored records use paymentMethod and decimal strings."""
        raw = encode_transactions([Transaction.from_draft("1", make_draft(amount="99.90"))])
        record = json.loads(raw)[0]
        assert record["paymentMethod"] == "cash"
        assert record["amount"] == "99.90"
        assert record["date"] == "2024-06-15"

    def test_numeric_amounts_accepted_on_load(self):
        raw = json.dumps([{
            "id": "1",
            "amount": 250,
            "type": "expense",
            "category": "food",
            "paymentMethod": "cash",
            "date": "2024-06-01",
            "note": "",
        }])
        assert decode_transactions(raw)[0].amount == Decimal("250")

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_collection_is_empty(self, raw):
        assert decode_transactions(raw) == []
        assert decode_budgets(raw) == []

    def test_corrupt_transactions_raise(self):
        with pytest.raises(CorruptDataError) as exc_info:
            decode_transactions("[{not json")
        assert exc_info.value.key == StoreKey.TRANSACTIONS

    def test_legacy_records_load_uncapped(self):
        """Test old records with extra precision or long text still load."""
        raw = json.dumps([
            {
                "id": "1700000000000", "amount": 10.555, "type": "expense",
                "category": "food", "paymentMethod": "cash",
                "date": "2024-06-01", "note": "",
            },
            {
                "id": "1700000000001", "amount": "42", "type": "expense",
                "category": "c" * 80, "paymentMethod": "cash",
                "date": "2024-06-02", "note": "n" * 600,
            },
        ])
        transactions = decode_transactions(raw)
        assert transactions[0].amount == Decimal("10.555")
        assert len(transactions[1].note) == 600
        assert len(transactions[1].category) == 80

    def test_high_precision_amount_round_trip(self, make_draft):
        transaction = Transaction.from_draft("1", make_draft(amount="10.555"))
        assert decode_transactions(encode_transactions([transaction]))[0].amount == Decimal("10.555")

    def test_invalid_record_raises(self):
        """Test a stored negative amount is not silently accepted."""
        raw = json.dumps([{
            "id": "1", "amount": "-5", "type": "expense", "category": "food",
            "paymentMethod": "cash", "date": "2024-06-01", "note": "",
        }])
        with pytest.raises(CorruptDataError):
            decode_transactions(raw)

    def test_budgets_round_trip_and_dedupe(self):
        budgets = [
            CategoryBudget(category="food", limit=Decimal("100")),
            CategoryBudget(category="rent", limit=Decimal("200")),
        ]
        assert decode_budgets(encode_budgets(budgets)) == budgets

        raw = json.dumps([
            {"category": "food", "limit": "100"},
            {"category": "food", "limit": "300"},
        ])
        assert decode_budgets(raw) == [CategoryBudget(category="food", limit=Decimal("300"))]

    def test_notifications_use_camel_case(self):
        raw = encode_notifications(NotificationPreferences(budget_alert=True))
        assert json.loads(raw) == {"budgetAlert": True, "dailyReminder": False}
        assert decode_notifications(raw).budget_alert is True


class TestDecodePreferences:
    """Tests for building preferences from scalar keys."""

    def test_all_missing_gives_defaults(self):
        defaults = Preferences()
        prefs = decode_preferences({}, defaults)
        assert prefs.language == defaults.language
        assert prefs.currency == defaults.currency
        assert prefs.pin is None

    def test_stored_values_win(self):
        prefs = decode_preferences({
            StoreKey.LANGUAGE: "en",
            StoreKey.THEME: "dark",
            StoreKey.CURRENCY: "Tk",
            StoreKey.PIN: "0420",
            StoreKey.NOTIFICATIONS: '{"budgetAlert": true}',
        }, Preferences())
        assert prefs.language == Language.EN
        assert prefs.theme == Theme.DARK
        assert prefs.currency == "Tk"
        assert prefs.pin == "0420"
        assert prefs.notifications.budget_alert is True

    def test_unknown_scalars_fall_back(self):
        prefs = decode_preferences({
            StoreKey.LANGUAGE: "fr",
            StoreKey.THEME: "neon",
            StoreKey.CURRENCY: "   ",
            StoreKey.PIN: "",
        }, Preferences())
        assert prefs.language == Language.BN
        assert prefs.theme == Theme.LIGHT
        assert prefs.currency == "৳"
        assert prefs.pin is None

    def test_malformed_pin_raises(self):
        with pytest.raises(CorruptDataError):
            decode_preferences({StoreKey.PIN: "12ab"}, Preferences())


class TestInMemoryStore:
    """Tests for the dict-backed store."""

    @pytest.mark.asyncio
    async def test_missing_key_is_none(self):
        assert await InMemoryStore().load(StoreKey.BUDGETS) is None

    @pytest.mark.asyncio
    async def test_save_and_load(self):
        store = InMemoryStore()
        await store.save(StoreKey.THEME, "dark")
        assert await store.load(StoreKey.THEME) == "dark"
        assert store.save_count == 1

    @pytest.mark.asyncio
    async def test_failing_writes(self):
        store = InMemoryStore()
        store.fail_writes = True
        with pytest.raises(StorageWriteError):
            await store.save(StoreKey.THEME, "dark")
        assert await store.load(StoreKey.THEME) is None


class TestJsonFileStore:
    """Tests for the local file store."""

    @pytest.mark.asyncio
    async def test_missing_file_is_none(self, tmp_path):
        store = JsonFileStore(tmp_path, retry_attempts=1)
        assert await store.load(StoreKey.TRANSACTIONS) is None

    @pytest.mark.asyncio
    async def test_save_creates_directory_and_file(self, tmp_path):
        data_dir = tmp_path / "nested" / "data"
        store = JsonFileStore(data_dir, retry_attempts=1)

        await store.save(StoreKey.TRANSACTIONS, "[]")
        await store.save(StoreKey.PIN, "1234")

        assert (data_dir / "tracker_transactions.json").read_text(encoding="utf-8") == "[]"
        assert (data_dir / "tracker_pin.txt").read_text(encoding="utf-8") == "1234"

    @pytest.mark.asyncio
    async def test_save_replaces_and_leaves_no_temp_files(self, tmp_path):
        store = JsonFileStore(tmp_path, retry_attempts=1)
        await store.save(StoreKey.CURRENCY, "৳")
        await store.save(StoreKey.CURRENCY, "$")

        assert await store.load(StoreKey.CURRENCY) == "$"
        assert [p.name for p in tmp_path.iterdir()] == ["tracker_currency.txt"]

    @pytest.mark.asyncio
    async def test_unicode_round_trip(self, tmp_path):
        store = JsonFileStore(tmp_path, retry_attempts=1)
        await store.save(StoreKey.LANGUAGE, "bn")
        await store.save(StoreKey.CURRENCY, "৳")
        assert await store.load(StoreKey.CURRENCY) == "৳"

    @pytest.mark.asyncio
    async def test_invalid_utf8_is_corrupt(self, tmp_path):
        store = JsonFileStore(tmp_path, retry_attempts=1)
        store.path_for(StoreKey.BUDGETS).write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(CorruptDataError):
            await store.load(StoreKey.BUDGETS)

    @pytest.mark.asyncio
    async def test_write_failure_after_retries(self, tmp_path):
        """Test a path that can never be written raises StorageWriteError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = JsonFileStore(blocker / "data", retry_attempts=2, retry_wait_seconds=0)

        with pytest.raises(StorageWriteError):
            await store.save(StoreKey.THEME, "dark")
