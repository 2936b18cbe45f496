"""
Prompt builder module - Constructs prompts for text-generation calls
"""

import json
from typing import Any, Dict, List, Optional


TASK_MANAGER_SYSTEM_PROMPT = """You are a task manager agent responsible for:
1. Analyzing tasks from the observer agent
2. Breaking down complex tasks into executable steps
3. Coordinating with the executor agent
4. Maintaining task state and progress
5. Handling errors and retries

Please process the given task and provide clear, executable instructions."""


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


class PromptBuilder:
    """
    Builds the prompts used by the agents.

    Keeping them here keeps agent code about control flow and lets tests
    assert on prompt contents without a model.
    """

    @staticmethod
    def task_manager_system_prompt() -> str:
        return TASK_MANAGER_SYSTEM_PROMPT

    @staticmethod
    def build_task_analysis_prompt(task: Dict[str, Any], tool_results: List[Dict[str, Any]]) -> str:
        """
        Prompt asking for next-step instructions for a task.

        Args:
            task: Task as a dict
            tool_results: Outcomes of the toolkit calls made for the task
        """
        return (
            "Process this task and tool results to generate specific executable actions:\n"
            f"Task: {_dump(task)}\n"
            f"Tool Results: {_dump(tool_results)}"
        )

    @staticmethod
    def observer_system_prompt(address: Optional[str] = None) -> str:
        wallet = f"The wallet you are observing is {address}. " if address else ""
        return (
            "You are an observer agent for a crypto portfolio. "
            f"{wallet}"
            "You receive the output of read-only market, wallet and social tools. "
            "Some tools may have failed; say which data is missing instead of guessing it. "
            "Produce a concise analysis of opportunities and risks relevant to the task."
        )

    @staticmethod
    def build_observer_context(task: str, tool_outcomes: List[Dict[str, Any]]) -> str:
        """Context listing every tool outcome, failures included."""
        sections = [f"Task: {task}", "", "Tool outputs:"]
        for outcome in tool_outcomes:
            if outcome.get("status") == "success":
                sections.append(f"- {outcome['tool']} (ok): {_dump(outcome.get('result'))}")
            else:
                sections.append(f"- {outcome['tool']} (failed): {outcome.get('error')}")
        sections.append("")
        sections.append("Write the analysis for this task.")
        return "\n".join(sections)

    @staticmethod
    def build_simulation_prompt(simulations: List[str]) -> str:
        return "\n".join([
            "You have simulated all the tasks you need to execute. This is the output of the simulation:",
            "\n".join(simulations),
            "Fix the tasks accordingly and return just the updated tasks.",
        ])
