import asyncio

from app import chat
from core.errors import NotFound, PersistenceError
from core.models import Category, Keyword
from core.platforms import Platform


class FakeSlack:
    def __init__(self):
        self.posted = []
        self.updated = []
        self.dialogs = []

    async def post_message(self, text="", *, attachments=None, channel=None, **extra):
        self.posted.append({"text": text, "attachments": attachments, "channel": channel, **extra})

    async def update_message(self, channel, ts, text="", *, attachments=None):
        self.updated.append({"channel": channel, "ts": ts, "text": text, "attachments": attachments})

    async def open_dialog(self, trigger_id, dialog):
        self.dialogs.append((trigger_id, dialog))


def _categories(selected_key):
    return [
        Category(platform=Platform.GURU, name="Design", external_key="design-art", selected=selected_key == "design-art"),
        Category(platform=Platform.GURU, name="Programming", external_key="prog", selected=selected_key == "prog"),
    ]


def test_flip_updates_the_original_message(monkeypatch):
    slack = FakeSlack()
    flipped = []
    monkeypatch.setattr(chat, "flip_category_selection", lambda platform, key: flipped.append((platform, key)))
    monkeypatch.setattr(chat, "get_categories", lambda platform: _categories("prog"))

    asyncio.run(chat.flip_category_selection_slack(slack, Platform.GURU, "C1", "1.0", "prog"))

    assert flipped == [(Platform.GURU, "prog")]
    assert slack.posted == []
    assert slack.updated[0]["channel"] == "C1"
    assert slack.updated[0]["ts"] == "1.0"
    texts = [a["actions"][0]["text"] for a in slack.updated[0]["attachments"]]
    assert texts == ["Design", "Programming ✔"]


def test_flip_of_unknown_category_reports_error(monkeypatch, caplog):
    slack = FakeSlack()

    def _missing(platform, key):
        raise NotFound(f"No {platform.value} category with key {key!r}")

    monkeypatch.setattr(chat, "flip_category_selection", _missing)

    with caplog.at_level("ERROR"):
        asyncio.run(chat.flip_category_selection_slack(slack, Platform.GURU, "C1", "1.0", "gone"))

    assert slack.updated == []
    assert slack.posted[0]["attachments"][0]["title"] == "That didn't work"
    assert slack.posted[0]["channel"] == "C1"
    assert any("Could not flip category" in rec.message for rec in caplog.records)


def test_submit_keywords_confirms(monkeypatch):
    slack = FakeSlack()
    stored = {}

    def _set(platform, values):
        stored[platform] = list(values)
        return [Keyword(platform=platform, value=v) for v in values]

    monkeypatch.setattr(chat, "set_keywords", _set)

    asyncio.run(chat.submit_keywords(slack, Platform.FREELANCER, "python, scraping", "C2"))

    assert stored[Platform.FREELANCER] == ["python", "scraping"]
    assert slack.posted[0]["text"] == "Freelancer keywords updated: python, scraping"


def test_submit_keywords_persistence_error_reports_error(monkeypatch):
    slack = FakeSlack()

    def _broken(platform, values):
        raise PersistenceError("db down")

    monkeypatch.setattr(chat, "set_keywords", _broken)

    asyncio.run(chat.submit_keywords(slack, Platform.FREELANCER, "python", "C2"))

    assert slack.posted[0]["attachments"][0]["title"] == "That didn't work"


def test_send_categories_posts_picker(monkeypatch):
    slack = FakeSlack()
    monkeypatch.setattr(chat, "get_categories", lambda platform: _categories("design-art"))

    asyncio.run(chat.send_categories(slack, Platform.GURU, "C3"))

    assert slack.posted[0]["channel"] == "C3"
    assert slack.posted[0]["attachments"][0]["callback_id"] == "guru_category"


def test_open_keywords_dialog_prefills(monkeypatch):
    slack = FakeSlack()
    monkeypatch.setattr(chat, "get_keywords", lambda platform: [Keyword(platform=platform, value="python")])

    asyncio.run(chat.open_keywords_dialog(slack, Platform.GURU, "trig"))

    trigger_id, dialog = slack.dialogs[0]
    assert trigger_id == "trig"
    assert dialog["elements"][0]["value"] == "python"
