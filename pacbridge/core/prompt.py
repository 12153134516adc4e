# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""Interactive questions asked during a build or a contribution."""

import click

YES_ANSWERS = ("", "y", "yes")


def is_yes(answer: str) -> bool:
    """Empty input counts as yes"""
    return answer.strip().lower() in YES_ANSWERS


class Prompter:
    """Reads answers from the terminal"""

    def read_line(self, text: str) -> str:
        return click.prompt(text, default="", show_default=False)

    def confirm(self, question: str) -> bool:
        return is_yes(self.read_line(f"{question} [Y/n]"))
