"""
BaseWorker Abstract Class

Provides the foundation for the analysis and editorial workers.
Every worker returns a ``WorkerResult`` and never raises to the orchestrator.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .llm import TextGenerator
from .protocol import WorkerResult


class BaseWorker(ABC):
    """
    Abstract base class for all workers in the pipeline.

    Each worker must implement:
    - _execute(): core logic; returns ``(output_text, metadata)``

    Workers automatically handle:
    - Error capture into ``WorkerResult.fail``
    - Execution timing in result metadata
    - Logging
    """

    def __init__(
        self,
        name: str,
        description: str,
        generator: TextGenerator,
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the base worker.

        Args:
            name: Unique name for this worker
            description: Brief description of what this worker does
            generator: Text-generation capability used by the worker
            config: Optional configuration dictionary
        """
        self.name = name
        self.description = description
        self.generator = generator
        self.config = config or {}
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Set up logger for this worker"""
        logger = logging.getLogger(f"worker.{self.name}")
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                f'%(asctime)s - {self.name} - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
            logger.setLevel(logging.INFO)
        return logger

    @abstractmethod
    async def _execute(self, **kwargs: Any) -> Tuple[str, Dict[str, Any]]:
        """
        Core execution logic for the worker.
        Must be implemented by all subclasses.

        Returns:
            Output text and metadata to attach to the WorkerResult
        """

    async def call(self, **kwargs: Any) -> WorkerResult:
        """
        Main entry point for worker execution.
        Handles execution, error capture and result formatting.

        Returns:
            WorkerResult with the generated text, or a failed result
        """
        start_time = datetime.now()

        try:
            output, metadata = await self._execute(**kwargs)
        except Exception as e:
            self.logger.error(f"Worker execution failed: {e}", exc_info=True)
            return WorkerResult.fail(
                str(e),
                worker_name=self.name,
                error_type=type(e).__name__,
                execution_time=(datetime.now() - start_time).total_seconds(),
            )

        metadata = dict(metadata)
        metadata.setdefault("worker", self.name)
        metadata["execution_time"] = (datetime.now() - start_time).total_seconds()
        self.logger.info(f"Worker produced {len(output)} chars")
        return WorkerResult.ok(output, worker_name=self.name, **metadata)

    def describe(self) -> Dict[str, Any]:
        """Name, description and generator role, for status reporting."""
        return {
            "name": self.name,
            "description": self.description,
            "role": self.generator.role,
        }

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', description='{self.description}')"
