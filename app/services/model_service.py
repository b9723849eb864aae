"""Owns the word vector model served by the query endpoints."""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

from app.config import settings
from app.models.vector_model import VectorModel

logger = logging.getLogger(__name__)


class ModelService:
    """Loads the model once and hands it to query evaluation."""

    def __init__(self, max_workers: Optional[int] = None) -> None:
        self.executor = ThreadPoolExecutor(max_workers=max_workers or settings.max_workers)
        self._model: Optional[VectorModel] = None
        self.source: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self._model is not None

    @property
    def model(self) -> VectorModel:
        if self._model is None:
            raise RuntimeError("Model not loaded. Call load() first.")
        return self._model

    def install(self, model: VectorModel, source: str = "memory") -> None:
        self._model = model
        self.source = source

    async def load(self, path: str, fmt: str = "binary") -> None:
        """Load a word2vec file without blocking the event loop."""

        model = await asyncio.get_running_loop().run_in_executor(
            self.executor, VectorModel.load, path, fmt
        )
        self.install(model, source=path)
        logger.info("Model service ready")

    def get_service_info(self) -> Dict[str, Any]:
        if self._model is None:
            return {"ready": False, "source": None, "vocabulary": 0, "dimensions": 0}
        return {
            "ready": True,
            "source": self.source,
            "vocabulary": self._model.size,
            "dimensions": self._model.dimensions,
        }


model_service = ModelService()
