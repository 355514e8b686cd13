from abc import ABC, abstractmethod

from dronelog.processor.models import FileProvenanceRecord
from dronelog.tasks.models import Task
from dronelog.verification.models import Pass, VerificationDecision


class BaseVerificationPolicy(ABC):
    """Decides whether an uploaded log file verifies a task."""

    @abstractmethod
    def decide(self, task: Task, provenance: FileProvenanceRecord) -> VerificationDecision:
        """Return Pass() or Fail(reason) for an eligible task."""


class AlwaysPassPolicy(BaseVerificationPolicy):
    """Accepts every log file that reaches an eligible task."""

    def decide(self, task: Task, provenance: FileProvenanceRecord) -> VerificationDecision:
        return Pass()


class VerificationPolicyFactory:
    POLICIES: dict[str, type[BaseVerificationPolicy]] = {
        "always_pass": AlwaysPassPolicy,
    }

    @classmethod
    def create(cls, name: str) -> BaseVerificationPolicy:
        policy_cls = cls.POLICIES.get(name.lower())
        if policy_cls is None:
            raise ValueError(
                f"Unknown verification policy '{name}'. Choose from: {list(cls.POLICIES)}"
            )
        return policy_cls()
