"""Study tutor: canned educational replies with an investment-advice guardrail."""

from __future__ import annotations

import re
from dataclasses import dataclass

ADVICE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"what should i (invest|buy|sell)",
        r"best (stock|coin|crypto|etf|fund)",
        r"give me (picks|recommendations|tips)",
        r"should i (buy|sell|hold)",
        r"what (stock|coin|crypto) (to|should)",
        r"recommend.*(stock|fund|investment)",
        r"which.*(stock|fund|etf).*(buy|invest)",
    )
)

GUARDRAIL_REPLY = (
    "I appreciate your curiosity! However, I'm an educational tutor and cannot provide "
    "personalized investment recommendations or financial advice. Instead, I can help you "
    "learn how to evaluate investment options, understand risk factors, and develop your own "
    "analytical framework. Would you like me to teach you about any of these topics?"
)

DEFAULT_REPLY = "That's a great question! Let me explain this concept in the context of personal finance. "

DISCLAIMER = (
    "Disclaimer: This is educational content only, not financial advice. "
    "Always consult a licensed financial advisor for personalized guidance."
)

# First matching keyword wins; order matters.
TOPIC_REPLIES: dict[str, str] = {
    "budget": (
        "A budget is your financial roadmap. It helps you plan where every dollar goes. "
        "The key components are: income tracking, expense categorization (needs vs wants), "
        "and setting savings goals. Would you like me to walk through the 50/30/20 framework?"
    ),
    "save": (
        "Saving is about building financial security. Start with an emergency fund covering "
        "3-6 months of expenses. Use the 'pay yourself first' method by automating savings "
        "before spending. Even $5/day adds up to $1,825/year!"
    ),
    "debt": (
        "Understanding debt is crucial. Focus on the difference between 'good debt' (mortgages, "
        "education) and 'bad debt' (high-interest credit cards). Two popular payoff strategies "
        "are the snowball method (smallest balance first) and avalanche method (highest interest first)."
    ),
    "invest": (
        "Investing basics start with understanding asset classes: stocks (ownership in companies), "
        "bonds (loans to entities), and index funds (diversified baskets of investments). Key "
        "principles include diversification, dollar-cost averaging, and the power of compound growth."
    ),
    "risk": (
        "Risk management in finance means understanding the relationship between potential returns "
        "and potential losses. Your risk tolerance depends on your time horizon, financial situation, "
        "and comfort level. Diversification is one of the best tools for managing investment risk."
    ),
    "credit": (
        "Your credit score (300-850) is based on: payment history (35%), amounts owed (30%), length "
        "of history (15%), new credit (10%), and credit mix (10%). Always pay at least the minimum "
        "on time and keep credit utilization below 30%."
    ),
    "compound": (
        "Compound growth is when your returns earn their own returns. For example, $1,000 at 8% "
        "annual return becomes $2,159 in 10 years and $10,063 in 30 years. This is why starting to "
        "invest early, even with small amounts, is so powerful."
    ),
}


@dataclass(frozen=True)
class TutorContext:
    lesson_title: str | None = None
    skill_title: str | None = None
    exercise_prompt: str | None = None

    def is_empty(self) -> bool:
        return not (self.lesson_title or self.skill_title or self.exercise_prompt)


@dataclass(frozen=True)
class TutorReply:
    reply: str
    is_guardrailed: bool


def is_advice_request(message: str) -> bool:
    """True when the message asks for personalised buy/sell picks."""
    return any(p.search(message) for p in ADVICE_PATTERNS)


def answer(message: str, context: TutorContext | None = None) -> TutorReply:
    """Produce the tutor's reply to one message."""
    if is_advice_request(message):
        return TutorReply(reply=GUARDRAIL_REPLY, is_guardrailed=True)

    lowered = message.lower()
    reply = next((text for keyword, text in TOPIC_REPLIES.items() if keyword in lowered), DEFAULT_REPLY)

    if context is not None and not context.is_empty():
        topic = context.skill_title or "personal finance"
        reply += (
            f"\n\nBased on what you're currently studying ({topic}), let me know if you'd like me "
            "to go deeper into any specific concept or provide practice questions."
        )

    reply += f"\n\n{DISCLAIMER}"
    return TutorReply(reply=reply, is_guardrailed=False)
