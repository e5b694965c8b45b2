"""Tests for the classification, deep research and extraction clients."""

import asyncio
import json
import random
from types import SimpleNamespace

import httpx
import pytest

from app.connectors import (
    ClassificationClient,
    DeepResearchClient,
    KeyPool,
    RandomKeySelector,
    RoundRobinKeySelector,
    extract_links,
    extract_research_text,
    make_selector,
)
from app.connectors.deep_search import build_research_prompt
from app.connectors.exa import parse_summary
from app.enrich import ExtractionClient, build_extraction_schema
from app.enrich.llm_parser import parse_json_object
from app.errors import ConfigError, ExternalServiceError
from app.models import CanonicalIdentifier, IdentifierKind


def domain_id(value: str = "sequoia.com") -> CanonicalIdentifier:
    return CanonicalIdentifier(kind=IdentifierKind.DOMAIN, value=value)


def make_classifier(handler, keys=("key-a",)) -> ClassificationClient:
    return ClassificationClient(
        KeyPool(list(keys)),
        base_url="https://exa.test",
        transport=httpx.MockTransport(handler),
    )


def exa_response(summary, subpages=None) -> dict:
    return {"results": [{"id": "https://sequoia.com", "summary": summary, "subpages": subpages or []}]}


class TestKeyPool:
    """Tests for API key selection."""

    def test_random_selector_draws_from_pool(self):
        pool = KeyPool(["a", "b", "c"], RandomKeySelector(random.Random(7)))
        picks = {pool.pick() for _ in range(50)}
        assert picks <= {"a", "b", "c"}
        assert len(picks) > 1

    def test_round_robin_cycles_in_order(self):
        pool = KeyPool(["a", "b"], RoundRobinKeySelector())
        assert [pool.pick() for _ in range(4)] == ["a", "b", "a", "b"]

    def test_empty_pool_is_config_error(self):
        with pytest.raises(ConfigError):
            KeyPool(["", ""]).pick()

    def test_make_selector(self):
        assert isinstance(make_selector("round_robin"), RoundRobinKeySelector)
        with pytest.raises(ConfigError):
            make_selector("least_used")


class TestLinkExtractor:
    """Tests for sub-page citation formatting."""

    def test_formats_title_and_url(self):
        links = extract_links([{"title": "About", "url": "https://acme.vc/about"}])
        assert links == ["[About](https://acme.vc/about)"]

    def test_title_falls_back_to_url(self):
        links = extract_links([{"url": "https://acme.vc/team"}])
        assert links == ["[https://acme.vc/team](https://acme.vc/team)"]

    def test_url_falls_back_to_id(self):
        links = extract_links([{"title": "Team", "id": "https://acme.vc/team"}])
        assert links == ["[Team](https://acme.vc/team)"]

    def test_skips_entries_without_url(self):
        links = extract_links([{"title": "Nothing"}, "junk", {"url": "https://acme.vc"}])
        assert links == ["[https://acme.vc](https://acme.vc)"]

    def test_non_list_yields_no_links(self):
        assert extract_links(None) == []


class TestClassificationClient:
    """Tests for the Exa classification call."""

    def test_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers["x-api-key"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=exa_response({}))

        client = make_classifier(handler)
        asyncio.run(client.classify(CanonicalIdentifier(kind=IdentifierKind.LINKEDIN, value="in/jane")))

        assert seen["url"] == "https://exa.test/contents"
        assert seen["key"] == "key-a"
        body = seen["body"]
        assert body["ids"] == ["https://www.linkedin.com/in/jane"]
        assert body["subpages"] == 5
        assert body["subpageTarget"] == [
            "about", "portfolio", "team", "contact", "thesis", "investments", "apply link",
        ]
        assert body["summary"]["schema"]["required"] == [
            "entity_type", "is_investor", "investor_types", "clean_name",
        ]

    def test_parses_string_summary_and_links(self):
        summary = json.dumps({
            "entity_type": "Organization",
            "is_investor": True,
            "investor_types": ["Venture Capital"],
            "clean_name": "Sequoia Capital",
        })
        subpages = [{"title": "Portfolio", "url": "https://sequoia.com/companies"}]

        def handler(request):
            return httpx.Response(200, json=exa_response(summary, subpages))

        result = asyncio.run(make_classifier(handler).classify(domain_id()))
        assert result.summary.is_investor
        assert result.summary.investor_types == ["Venture Capital"]
        assert result.summary.clean_name == "Sequoia Capital"
        assert result.summary.record_type == "firm"
        assert result.links == ["[Portfolio](https://sequoia.com/companies)"]

    def test_true_flag_with_no_types_is_not_investor(self):
        summary = {"entity_type": "Person", "is_investor": True, "investor_types": [], "clean_name": "Jane"}

        def handler(request):
            return httpx.Response(200, json=exa_response(summary))

        result = asyncio.run(make_classifier(handler).classify(domain_id()))
        assert result.summary.is_investor is False
        assert result.summary.investor_types is None
        assert result.summary.record_type == "person"

    def test_unparseable_summary_is_non_investor(self):
        def handler(request):
            return httpx.Response(200, json=exa_response("not json {"))

        result = asyncio.run(make_classifier(handler).classify(domain_id()))
        assert result.summary.is_investor is False
        assert result.summary.clean_name is None
        assert result.summary.entity_type is None

    def test_upstream_5xx_maps_to_502(self):
        def handler(request):
            return httpx.Response(503, text="overloaded")

        with pytest.raises(ExternalServiceError) as exc:
            asyncio.run(make_classifier(handler).classify(domain_id()))
        assert exc.value.status_code == 502
        assert exc.value.details == "overloaded"

    def test_upstream_4xx_maps_to_400(self):
        def handler(request):
            return httpx.Response(401, text="bad key")

        with pytest.raises(ExternalServiceError) as exc:
            asyncio.run(make_classifier(handler).classify(domain_id()))
        assert exc.value.status_code == 400

    def test_no_results_is_502(self):
        def handler(request):
            return httpx.Response(200, json={"results": []})

        with pytest.raises(ExternalServiceError) as exc:
            asyncio.run(make_classifier(handler).classify(domain_id()))
        assert exc.value.status_code == 502
        assert exc.value.message == "No results from Exa API"

    def test_transport_error_is_502(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ExternalServiceError) as exc:
            asyncio.run(make_classifier(handler).classify(domain_id()))
        assert exc.value.status_code == 502

    def test_no_keys_is_config_error(self):
        def handler(request):
            raise AssertionError("should not be called")

        with pytest.raises(ConfigError):
            asyncio.run(make_classifier(handler, keys=()).classify(domain_id()))

    def test_parse_summary_shapes(self):
        assert parse_summary({"a": 1}) == {"a": 1}
        assert parse_summary('{"a": 1}') == {"a": 1}
        assert parse_summary("[1, 2]") is None
        assert parse_summary(None) is None


class TestDeepResearchText:
    """Tests for pulling text out of loosely-shaped research responses."""

    def test_plain_string(self):
        assert extract_research_text("profile") == "profile"

    def test_data_string(self):
        assert extract_research_text({"data": "profile"}) == "profile"

    def test_data_object_is_stringified(self):
        assert extract_research_text({"data": {"a": 1}}) == '{"a": 1}'

    def test_literal_key(self):
        data = {"The response text from deep research is...": "profile"}
        assert extract_research_text(data) == "profile"

    def test_text_like_key(self):
        assert extract_research_text({"answer_content": "profile"}) == "profile"
        assert extract_research_text({"Response": "profile"}) == "profile"

    def test_result_or_output(self):
        assert extract_research_text({"result": "profile"}) == "profile"
        assert extract_research_text({"output": "profile"}) == "profile"

    def test_nothing_usable(self):
        assert extract_research_text({"status": "ok"}) is None
        assert extract_research_text({"data": ""}) is None
        assert extract_research_text("   ") is None
        assert extract_research_text(None) is None


class TestDeepResearchClient:
    """Tests for the deep research call."""

    def test_prompt_substitutes_name_and_types(self):
        prompt = build_research_prompt("Sequoia Capital", ["Venture Capital", "Private Equity"])
        assert "Create a full investor profile for Sequoia Capital (Venture Capital, Private Equity)" in prompt
        assert "[name](url)" in prompt

    def test_posts_prompt_and_returns_text(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"data": "Deep profile"})

        client = DeepResearchClient(
            url="https://research.test/run",
            api_key="secret",
            transport=httpx.MockTransport(handler),
        )
        text = asyncio.run(client.research("Sequoia Capital", ["Venture Capital"]))
        assert text == "Deep profile"
        assert "Sequoia Capital (Venture Capital)" in seen["body"]["input"]
        assert seen["auth"] == "Bearer secret"

    def test_empty_response_is_502(self):
        def handler(request):
            return httpx.Response(200, json={"status": "done"})

        client = DeepResearchClient(url="https://research.test/run", transport=httpx.MockTransport(handler))
        with pytest.raises(ExternalServiceError) as exc:
            asyncio.run(client.research("Acme", ["Venture Capital"]))
        assert exc.value.status_code == 502

    def test_upstream_error_status(self):
        def handler(request):
            return httpx.Response(500, text="boom")

        client = DeepResearchClient(url="https://research.test/run", transport=httpx.MockTransport(handler))
        with pytest.raises(ExternalServiceError) as exc:
            asyncio.run(client.research("Acme", ["Venture Capital"]))
        assert exc.value.status_code == 502
        assert exc.value.details == "boom"

    def test_missing_url_is_config_error(self):
        with pytest.raises(ConfigError):
            asyncio.run(DeepResearchClient(url="").research("Acme", []))


class FakeMessages:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.text)])


class TestExtractionClient:
    """Tests for the structured completion client."""

    def make_client(self, messages: FakeMessages) -> ExtractionClient:
        client = ExtractionClient(api_key="test-key", model="test-model", max_tokens=4000)
        client._client = SimpleNamespace(messages=messages)
        return client

    def test_returns_decoded_object(self):
        messages = FakeMessages(text='```json\n{"hq_country": "US"}\n```')
        client = self.make_client(messages)
        result = asyncio.run(client.extract(build_extraction_schema(is_person=False), "profile text"))

        assert result == {"hq_country": "US"}
        call = messages.calls[0]
        assert call["max_tokens"] == 4000
        assert "Do not invent data." in call["system"]
        user = call["messages"][0]["content"]
        assert user.startswith("Analyze the investment profile.")
        assert user.endswith("Input text:\n<<<<profile text>>>>")

    def test_api_error_is_reported_in_band(self):
        import anthropic

        error = anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com"))
        client = self.make_client(FakeMessages(error=error))
        result = asyncio.run(client.extract(build_extraction_schema(is_person=False), "x"))
        assert "error" in result

    def test_missing_key_is_config_error(self):
        client = ExtractionClient(api_key="")
        with pytest.raises(ConfigError):
            asyncio.run(client.extract(build_extraction_schema(is_person=False), "x"))

    def test_parse_json_object(self):
        assert parse_json_object('{"a": 1}') == {"a": 1}
        assert "error" in parse_json_object("no json here")
        assert "error" in parse_json_object("[1, 2]")
