"""Evaluation request assembly."""

from __future__ import annotations

# The verdict is read by a substring check for PASS, so the closing
# instruction is what keeps the service answer parseable.
PROMPT_TEMPLATE = """SYSTEM:
You are *Bouncer*, an uncompromising reviewer.
Enforce the following rules:
{rules}

USER:
Commit {revision_id} diff:
{diff}
Return exactly:
PASS – if all rules satisfied
or
FAIL – if any rule violated
And give a brief justification (<40 words)."""


def build_prompt(rules: str, revision_id: str, diff: str) -> str:
    return PROMPT_TEMPLATE.format(rules=rules, revision_id=revision_id, diff=diff)
