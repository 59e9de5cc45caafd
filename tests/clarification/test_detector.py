"""Tests for clarification detection."""

import pytest

from dapp_intent.analysis.analyzer import analyze_recording
from dapp_intent.clarification.detector import (
    detect_action_ambiguities,
    detect_clarifications,
    detect_network_ambiguities,
    detect_selector_ambiguities,
    detect_wait_ambiguities,
    has_css_in_js_class,
    is_generic_selector,
)
from dapp_intent.clarification.models import (
    ClarificationAnswer,
    ClarificationCategory,
    ClarificationQuestion,
)
from dapp_intent.config import AnalysisSettings

# =============================================================================
# Selector Heuristics
# =============================================================================


class TestSelectorHeuristics:
    """Tests for is_generic_selector and has_css_in_js_class."""

    @pytest.mark.parametrize("selector", [
        "div",
        "button",
        "span",
        "a",
        "div:nth-child(3)",
        "button:nth-child(12)",
        "main div div div",
        "#app button span",
    ])
    def test_generic(self, selector):
        assert is_generic_selector(selector)

    @pytest.mark.parametrize("selector", [
        '[data-testid="connect"]',
        "#connect-button",
        "button.primary",
        "div > span.label",
    ])
    def test_not_generic(self, selector):
        assert not is_generic_selector(selector)

    @pytest.mark.parametrize("selector", [
        "div.Button_root__a1b2c",
        "button.css-1x2y3z",
        "div.sc-bdVaJa",
        "span.jsx-123",
        "div.token-a8f3k2",
    ])
    def test_css_in_js(self, selector):
        assert has_css_in_js_class(selector)

    @pytest.mark.parametrize("selector", ["#connect", "button.btn", '[data-testid="x"]'])
    def test_stable_classes(self, selector):
        assert not has_css_in_js_class(selector)


# =============================================================================
# Selector Pass
# =============================================================================


class TestDetectSelectorAmbiguities:
    """Tests for detect_selector_ambiguities."""

    def test_generic_div_with_text(self, make_recording, click):
        """Test a bare div click raises exactly one question."""
        recording = make_recording([click("Open menu", selector="div")])

        questions = detect_selector_ambiguities(analyze_recording(recording))

        assert len(questions) == 1
        question = questions[0]
        assert question.id == "selector-0"
        assert question.category == ClarificationCategory.SELECTOR
        assert question.step_index == 0
        assert question.default_answer == 'Use text: "Open menu"'
        assert question.options[0] == 'Use text: "Open menu"'
        assert question.context == 'Step 1: Click on "Open menu"'

    def test_test_id_preferred_as_default(self, make_recording, click):
        recording = make_recording([click("Go", selector="button", test_id="go-btn")])

        question = detect_selector_ambiguities(analyze_recording(recording))[0]

        assert question.default_answer == 'Use data-testid: "go-btn"'

    def test_no_text_no_default(self, make_recording, click):
        recording = make_recording([click(None, selector="span")])

        question = detect_selector_ambiguities(analyze_recording(recording))[0]

        assert question.default_answer is None
        assert not any(o.startswith("Use text") for o in question.options)
        assert question.context == 'Step 1: Click on "element"'

    def test_css_in_js_selector(self, make_recording, click):
        recording = make_recording([click("Buy", selector="button.css-1a2b3c", test_id="buy")])

        questions = detect_selector_ambiguities(analyze_recording(recording))

        assert [q.id for q in questions] == ["cssjs-0"]
        assert questions[0].default_answer == 'Use data-testid: "buy"'

    def test_inputs_not_checked(self, make_recording, type_into):
        recording = make_recording([type_into("div", "1")])
        assert detect_selector_ambiguities(analyze_recording(recording)) == []


# =============================================================================
# Wait Pass
# =============================================================================


class TestDetectWaitAmbiguities:
    """Tests for detect_wait_ambiguities."""

    def test_long_pause(self, make_recording, click, settings):
        recording = make_recording([
            click("A", timestamp=0),
            click("B", timestamp=7500),
        ])

        questions = detect_wait_ambiguities(analyze_recording(recording), settings)

        assert len(questions) == 1
        question = questions[0]
        assert question.id == "wait-1"
        assert question.category == ClarificationCategory.WAIT
        assert "7.5s pause" in question.question
        assert question.context == "Between step 1 and 2"
        assert question.options[-1] == "Use fixed timeout (8s)"
        assert question.default_answer is None

    def test_pause_at_threshold_ignored(self, make_recording, click, settings):
        recording = make_recording([
            click("A", timestamp=0),
            click("B", timestamp=5000),
        ])
        assert detect_wait_ambiguities(analyze_recording(recording), settings) == []

    def test_threshold_configurable(self, make_recording, click):
        recording = make_recording([
            click("A", timestamp=0),
            click("B", timestamp=7500),
        ])
        settings = AnalysisSettings(_env_file=None, wait_gap_threshold_ms=10000)

        assert detect_wait_ambiguities(analyze_recording(recording), settings) == []

    def test_every_transaction(self, make_recording, click, web3, settings):
        recording = make_recording([
            click("Buy"),
            web3("eth_sendTransaction"),
            click("Sell"),
            web3("eth_sendTransaction"),
        ])

        questions = detect_wait_ambiguities(analyze_recording(recording), settings)

        assert [(q.id, q.step_index) for q in questions] == [("txwait-1", 1), ("txwait-3", 3)]
        assert questions[0].default_answer == "Wait for success toast/notification"
        assert questions[0].context == "After transaction at step 2"


# =============================================================================
# Network Pass
# =============================================================================


class TestDetectNetworkAmbiguities:
    """Tests for detect_network_ambiguities."""

    def test_non_default_chain(self, make_recording, web3, settings):
        recording = make_recording([web3("eth_chainId", result="0x2105")])

        questions = detect_network_ambiguities(analyze_recording(recording), settings)

        assert len(questions) == 1
        question = questions[0]
        assert question.id == "network-setup"
        assert question.category == ClarificationCategory.NETWORK
        assert "chain ID 8453 (Base)" in question.question
        assert question.step_index is None
        assert question.options[0] == "Add network to MetaMask at start and switch to it"
        assert question.default_answer == "Let dApp trigger network switch and approve in wallet"

    def test_unnamed_chain(self, make_recording, web3, settings):
        recording = make_recording([web3("eth_chainId", result="0x3e7")])

        question = detect_network_ambiguities(analyze_recording(recording), settings)[0]

        assert "chain ID 999." in question.question

    def test_default_chain_no_question(self, make_recording, web3, settings):
        recording = make_recording([web3("eth_chainId", result="0x1")])
        assert detect_network_ambiguities(analyze_recording(recording), settings) == []

    def test_configured_default_chain(self, make_recording, web3):
        recording = make_recording([web3("eth_chainId", result="0x2105")])
        settings = AnalysisSettings(_env_file=None, default_chain_id=8453)

        assert detect_network_ambiguities(analyze_recording(recording), settings) == []

    def test_no_chain_no_question(self, make_recording, click, settings):
        recording = make_recording([click("Trade")])
        assert detect_network_ambiguities(analyze_recording(recording), settings) == []


# =============================================================================
# Action Pass
# =============================================================================


class TestDetectActionAmbiguities:
    """Tests for detect_action_ambiguities."""

    @pytest.mark.parametrize("text", ["Rabby Wallet", "Coinbase Wallet", "WalletConnect", "Rainbow"])
    def test_non_default_wallet(self, make_recording, click, settings, text):
        recording = make_recording([click(text)])

        questions = detect_action_ambiguities(analyze_recording(recording), settings)

        assert len(questions) == 1
        assert questions[0].id == "wallet-0"
        assert questions[0].category == ClarificationCategory.ACTION
        assert questions[0].default_answer == "Yes, use MetaMask"

    def test_metamask_no_question(self, make_recording, click, settings):
        recording = make_recording([click("MetaMask")])
        assert detect_action_ambiguities(analyze_recording(recording), settings) == []

    def test_approval(self, make_recording, click, web3, scroll, settings):
        recording = make_recording([
            scroll(),
            click("Approve USDC"),
            web3("eth_sendTransaction"),
        ])

        questions = detect_action_ambiguities(analyze_recording(recording), settings)

        assert len(questions) == 1
        question = questions[0]
        assert question.id == "approve-1"
        assert question.step_index == 1
        assert question.context == "Approval flow at steps 1-2"
        assert question.default_answer == "Use default amount from dApp"


# =============================================================================
# detect_clarifications
# =============================================================================


class TestDetectClarifications:
    """Tests for detect_clarifications."""

    def test_trading_session(self, trading_recording, settings):
        questions = detect_clarifications(analyze_recording(trading_recording), settings)

        assert [q.id for q in questions] == [
            "selector-1",
            "selector-3",
            "selector-8",
            "selector-14",
            "txwait-15",
        ]
        assert questions[3].default_answer == 'Use data-testid: "place-order"'

    def test_pass_order(self, make_recording, click, web3, settings):
        """Test questions are grouped selector, wait, network, action."""
        recording = make_recording([
            web3("eth_chainId", result="0xa4b1", timestamp=0),
            click("Rabby", selector="div", timestamp=9000),
        ])

        questions = detect_clarifications(analyze_recording(recording), settings)

        assert [q.category for q in questions] == [
            ClarificationCategory.SELECTOR,
            ClarificationCategory.WAIT,
            ClarificationCategory.NETWORK,
            ClarificationCategory.ACTION,
        ]

    def test_clean_recording(self, make_recording, click, settings):
        recording = make_recording([click("Trade", selector='[data-testid="trade"]')])
        assert detect_clarifications(analyze_recording(recording), settings) == []

    def test_does_not_modify_analysis(self, trading_recording, settings):
        analysis = analyze_recording(trading_recording)
        before = analysis.to_dict()

        detect_clarifications(analysis, settings)

        assert analysis.to_dict() == before


# =============================================================================
# Models
# =============================================================================


class TestClarificationModels:
    """Tests for clarification model serialisation."""

    def test_question_to_dict(self):
        question = ClarificationQuestion(
            id="network-setup",
            category=ClarificationCategory.NETWORK,
            question="How?",
            context="Test initialization",
            options=("a", "b"),
        )

        assert question.to_dict() == {
            "id": "network-setup",
            "type": "network",
            "question": "How?",
            "context": "Test initialization",
            "options": ["a", "b"],
        }

    def test_answer_to_dict(self):
        answer = ClarificationAnswer(question_id="wait-3", answer="Wait for toast")
        assert answer.to_dict() == {"question_id": "wait-3", "answer": "Wait for toast"}
