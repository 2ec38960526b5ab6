"""
Pytest configuration and fixtures.
"""
import json
from datetime import date
from typing import Optional

import pytest
from PIL import Image

from revenue_parser.config import AppConfig, OpenAIConfig
from revenue_parser.models.revenue import LineItem, RevenueRecord

FAKE_API_KEY = "sk-test-0123456789abcdefghijklmnop"

MINIMAL_PDF = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


class FakeResponse:
    """Stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload=None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text
        self.content = text.encode("utf-8")

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class FakeSession:
    """Records requests and replays queued responses or exceptions."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def _next(self, method: str, url: str, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)


def completion(content: str) -> FakeResponse:
    """A chat completions response carrying ``content``."""
    return FakeResponse(200, {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 1200, "completion_tokens": 150},
    })


class FakeClient:
    """Extraction client returning canned answers or raising queued errors."""

    model = "fake-vision-model"

    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls = []

    def extract(self, images, prompt):
        self.calls.append((list(images), prompt))
        answer = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def openai_config() -> OpenAIConfig:
    """OpenAI settings with a dummy key."""
    return OpenAIConfig(api_key=FAKE_API_KEY)


@pytest.fixture
def app_config(openai_config) -> AppConfig:
    """Application config with no retries."""
    return AppConfig(openai=openai_config)


@pytest.fixture
def today() -> date:
    return date(2024, 1, 15)


@pytest.fixture
def sample_record() -> RevenueRecord:
    """A two-well statement: gross 1000, taxes 50, net 800."""
    return RevenueRecord(
        company="Devon Energy",
        period="December 2021",
        total_revenue=1000.0,
        line_items=(
            LineItem(
                description="Verde 13-2HZ NBRR 138366-1 GAS",
                quantity=150.0,
                rate=4.0,
                amount=600.0,
            ),
            LineItem(
                description="Smith Lease Oil",
                quantity=5.0,
                rate=80.0,
                amount=400.0,
            ),
        ),
        taxes=50.0,
        net_revenue=800.0,
    )


@pytest.fixture
def sample_response(sample_record) -> str:
    """Model output for ``sample_record`` wrapped in a code fence."""
    return "```json\n" + json.dumps(sample_record.to_dict(), indent=2) + "\n```"


@pytest.fixture
def pdf_bytes() -> bytes:
    return MINIMAL_PDF


@pytest.fixture
def fake_pdf2image(monkeypatch):
    """Replace poppler calls with a renderer producing blank pages."""
    state = {"pages": 2, "calls": []}

    def fake_info(data, poppler_path=None):
        return {"Pages": state["pages"]}

    def fake_convert(data, dpi=None, fmt=None, first_page=None, last_page=None, poppler_path=None):
        state["calls"].append((first_page, last_page, dpi))
        return [Image.new("RGB", (200, 300), color="white")]

    monkeypatch.setattr("revenue_parser.pdf.rasterizer.pdfinfo_from_bytes", fake_info)
    monkeypatch.setattr("revenue_parser.pdf.rasterizer.convert_from_bytes", fake_convert)
    return state
