"""Tests for couple identity and onboarding state."""

from olive.couple import DEFAULT_PARTNER1, DEFAULT_PARTNER2, Couple, Onboarding
from olive.storage import KEY_COUPLE_NAMES, KEY_CURRENT_USER, KEY_ONBOARDING, MemoryStorage


def test_defaults_without_saved_names(storage) -> None:
    couple = Couple(storage)
    couple.load()
    assert (couple.partner1, couple.partner2) == (DEFAULT_PARTNER1, DEFAULT_PARTNER2)
    assert couple.current_user == ""
    assert couple.active_user == DEFAULT_PARTNER1


def test_current_user_defaults_to_partner1_and_is_persisted() -> None:
    storage = MemoryStorage({KEY_COUPLE_NAMES: '{"partner1": "Alex", "partner2": "Sam"}'})
    couple = Couple(storage)
    couple.load()
    assert couple.current_user == "Alex"
    assert storage.get_item(KEY_CURRENT_USER) == "Alex"


def test_save_names_and_switch(storage) -> None:
    couple = Couple(storage)
    couple.save_names("Alex", "Sam")
    assert couple.active_user == "Alex"

    assert couple.switch_user() == "Sam"
    assert couple.switch_user() == "Alex"
    couple.switch_user()

    reloaded = Couple(storage)
    reloaded.load()
    assert (reloaded.partner1, reloaded.partner2) == ("Alex", "Sam")
    assert reloaded.current_user == "Sam"


def test_corrupt_names_keep_defaults() -> None:
    couple = Couple(MemoryStorage({KEY_COUPLE_NAMES: "garbage"}))
    couple.load()
    assert couple.partner1 == DEFAULT_PARTNER1


def test_storage_failure_is_not_fatal(failing_storage_factory) -> None:
    couple = Couple(failing_storage_factory(fail_reads=True, fail_writes=True))
    couple.load()
    couple.save_names("Alex", "Sam")
    assert couple.switch_user() == "Sam"


def test_onboarding_complete_and_reset(storage) -> None:
    onboarding = Onboarding(storage)
    onboarding.load()
    assert not onboarding.is_onboarded

    Couple(storage).save_names("Alex", "Sam")
    onboarding.complete()
    assert storage.get_item(KEY_ONBOARDING) == "completed"

    fresh = Onboarding(storage)
    fresh.load()
    assert fresh.is_onboarded

    fresh.reset()
    assert not fresh.is_onboarded
    assert storage.get_item(KEY_COUPLE_NAMES) is None
