"""Tests for the recording translation pipeline."""

import json
from concurrent.futures import ThreadPoolExecutor

from dapp_intent.intent.models import IntentStepType
from dapp_intent.pipeline import IntentPlan, translate_recording


class TestTranslateRecording:
    """Tests for translate_recording."""

    def test_trading_session(self, trading_recording, settings):
        """Test analysis, intents and clarifications are produced together."""
        plan = translate_recording(trading_recording, settings)

        assert isinstance(plan, IntentPlan)
        assert len(plan.analysis.patterns) == 5
        assert len(plan.intent_steps) == 7
        assert plan.intent_steps[-1].type == IntentStepType.VERIFY_STATE
        assert [q.id for q in plan.clarifications] == [
            "selector-1",
            "selector-3",
            "selector-8",
            "selector-14",
            "txwait-15",
        ]
        assert plan.needs_clarification

    def test_no_clarifications(self, make_recording, click, settings):
        recording = make_recording([click("Trade", selector="#trade")])

        plan = translate_recording(recording, settings)

        assert not plan.needs_clarification

    def test_to_dict_is_json_serialisable(self, trading_recording, settings):
        data = translate_recording(trading_recording, settings).to_dict()

        decoded = json.loads(json.dumps(data))
        assert decoded["analysis"]["test_type"] == "connection"
        assert decoded["intent_steps"][1]["type"] == "connect_wallet"
        assert decoded["clarifications"][-1]["id"] == "txwait-15"

    def test_concurrent_calls(self, trading_recording, make_recording, click, web3, settings):
        """Test independent recordings can be translated in parallel."""
        other = make_recording([click("Connect"), web3("eth_requestAccounts")])
        expected = {
            "trade": translate_recording(trading_recording, settings),
            "connect": translate_recording(other, settings),
        }

        with ThreadPoolExecutor(max_workers=4) as pool:
            trade = [pool.submit(translate_recording, trading_recording, settings) for _ in range(4)]
            connect = [pool.submit(translate_recording, other, settings) for _ in range(4)]
            results = [
                (f.result(), expected["trade"]) for f in trade
            ] + [
                (f.result(), expected["connect"]) for f in connect
            ]

        for actual, wanted in results:
            assert actual == wanted
