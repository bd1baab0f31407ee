# teamsync/services/cascade.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass
class CascadeStep:
    """
    One gateway action of a cascade plus the store change it licenses.

    `apply` runs only after every step of the workflow succeeded.
    """

    name: str
    action: Callable[[], Awaitable[object]]
    apply: Callable[[], None] = lambda: None


@dataclass
class CascadeReport:
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, BaseException] = field(default_factory=dict)
    compensated: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed


class CascadeWorkflow:
    """
    Multi-collection change without a cross-collection transaction.

    Steps are grouped into stages: stages run in order, the steps of one
    stage run concurrently and are joined before the next stage starts. A
    failure stops the workflow after its stage and runs the compensation
    step (a full reload) instead of applying any store change.
    """

    def __init__(
        self,
        name: str,
        compensate: Callable[[], Awaitable[None]],
    ) -> None:
        self.name = name
        self._stages: list[list[CascadeStep]] = []
        self._compensate = compensate

    def stage(self, *steps: CascadeStep) -> "CascadeWorkflow":
        self._stages.append(list(steps))
        return self

    @property
    def steps(self) -> list[CascadeStep]:
        return [step for stage in self._stages for step in stage]

    async def run(self) -> CascadeReport:
        report = CascadeReport()

        for stage in self._stages:
            if not stage:
                continue
            results = await asyncio.gather(
                *(step.action() for step in stage),
                return_exceptions=True,
            )
            for step, result in zip(stage, results):
                if isinstance(result, BaseException):
                    report.failed[step.name] = result
                else:
                    report.succeeded.append(step.name)
            if report.failed:
                break

        if report.failed:
            for step_name, exc in report.failed.items():
                logger.warning("Cascade %s: step %s failed: %s", self.name, step_name, exc)
            logger.warning("Cascade %s: running reload compensation", self.name)
            await self._compensate()
            report.compensated = True
            return report

        for step in self.steps:
            step.apply()
        return report
