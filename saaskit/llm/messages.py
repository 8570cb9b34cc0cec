"""
Conversion of UI messages into the model history format.
"""
from typing import Dict, List

from saaskit.models.chat import UIMessage


def to_model_messages(messages: List[UIMessage]) -> List[Dict[str, str]]:
    """
    Turn UI messages into ``[{"role", "content"}]`` history entries.

    System messages are dropped because the persona prompt is the system
    instruction. Messages without any text part are dropped as well.
    """
    history = []
    for message in messages:
        if message.role == "system":
            continue
        text = message.text()
        if not text:
            continue
        history.append({"role": message.role, "content": text})
    return history
