import pytest
from aiohttp import test_utils, web

from gastobot.bot.controller import CONNECTION_FAILURE_MESSAGE, SUCCESS_MESSAGE, ConversationController
from gastobot.services.expense_api import (
    ApiConnectionError,
    ApiResponseError,
    ExpenseApiClient,
    SubmissionAck,
    SubmissionError,
)
from gastobot.services.metrics import SubmissionOutcome, get_metrics


def make_app(status: int, body: str, received: list) -> web.Application:
    async def create_expense(request: web.Request) -> web.Response:
        received.append(await request.json())
        return web.Response(status=status, text=body)

    app = web.Application()
    app.router.add_post("/expenses", create_expense)
    return app


class TestSubmit:
    @pytest.mark.asyncio
    async def test_success_posts_json(self, sample_record):
        received = []
        async with test_utils.TestServer(make_app(201, '{"id": 1}', received)) as server:
            client = ExpenseApiClient(str(server.make_url("/expenses")))
            ack = await client.submit(sample_record)

        assert ack == SubmissionAck(status=201)
        assert received == [sample_record.to_payload()]

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_status_and_body(self, sample_record):
        async with test_utils.TestServer(make_app(422, "category is required", [])) as server:
            client = ExpenseApiClient(str(server.make_url("/expenses")))
            with pytest.raises(ApiResponseError) as exc_info:
                await client.submit(sample_record)

        assert exc_info.value.status == 422
        assert exc_info.value.body == "category is required"
        assert isinstance(exc_info.value, SubmissionError)

    @pytest.mark.asyncio
    async def test_connection_refused(self, sample_record):
        client = ExpenseApiClient(f"http://127.0.0.1:{test_utils.unused_port()}/expenses")

        with pytest.raises(ApiConnectionError) as exc_info:
            await client.submit(sample_record)

        assert exc_info.value.cause is not None

    @pytest.mark.asyncio
    async def test_records_unreachable_outcome(self, sample_record):
        submissions = get_metrics().submissions
        before = submissions.outcomes[SubmissionOutcome.UNREACHABLE]

        client = ExpenseApiClient(f"http://127.0.0.1:{test_utils.unused_port()}/expenses")
        with pytest.raises(ApiConnectionError):
            await client.submit(sample_record)

        assert submissions.outcomes[SubmissionOutcome.UNREACHABLE] == before + 1

    @pytest.mark.asyncio
    async def test_rejection_recorded_without_response_body(self, sample_record):
        submissions = get_metrics().submissions
        before = submissions.outcomes[SubmissionOutcome.REJECTED]

        async with test_utils.TestServer(make_app(500, "secret stack trace", [])) as server:
            client = ExpenseApiClient(str(server.make_url("/expenses")))
            with pytest.raises(ApiResponseError):
                await client.submit(sample_record)

        assert submissions.outcomes[SubmissionOutcome.REJECTED] == before + 1
        assert submissions.last_error == "HTTP 500"

    @pytest.mark.asyncio
    async def test_success_recorded(self, sample_record):
        submissions = get_metrics().submissions
        before = submissions.outcomes[SubmissionOutcome.OK]

        async with test_utils.TestServer(make_app(200, "", [])) as server:
            await ExpenseApiClient(str(server.make_url("/expenses"))).submit(sample_record)

        assert submissions.outcomes[SubmissionOutcome.OK] == before + 1


class TestConversationAgainstServer:
    async def run_conversation(self, store, sender, url):
        controller = ConversationController(store, ExpenseApiClient(url), sender)
        await controller.begin(7, "Ana")
        await controller.handle_text(7, "Lunch")
        await controller.handle_text(7, "Food")
        await controller.handle_text(7, "23.50")

    @pytest.mark.asyncio
    async def test_end_to_end_success(self, store, sender):
        received = []
        async with test_utils.TestServer(make_app(201, "", received)) as server:
            await self.run_conversation(store, sender, str(server.make_url("/expenses")))

        assert received[0]["description"] == "Lunch"
        assert received[0]["category"] == "Food"
        assert received[0]["value"] == 23.5
        assert received[0]["initiatorName"] == "Ana"
        assert received[0]["date"].endswith("Z")
        assert sender.texts()[-1] == SUCCESS_MESSAGE
        assert store.get(7) is None

    @pytest.mark.asyncio
    async def test_end_to_end_server_error(self, store, sender):
        async with test_utils.TestServer(make_app(500, "internal error", [])) as server:
            await self.run_conversation(store, sender, str(server.make_url("/expenses")))

        assert "500 - internal error" in sender.texts()[-1]
        assert store.get(7) is None

    @pytest.mark.asyncio
    async def test_end_to_end_unreachable(self, store, sender):
        await self.run_conversation(store, sender, f"http://127.0.0.1:{test_utils.unused_port()}/expenses")

        assert sender.texts()[-1] == CONNECTION_FAILURE_MESSAGE
        assert store.get(7) is None
