# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 14:05
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Turn per-worker images into one collage plus a worker attribution line
"""
import base64
import binascii
import math
from collections import Counter
from dataclasses import dataclass
from io import BytesIO
from typing import Iterable, List, Sequence, Tuple

from PIL import Image
from loguru import logger

from errors import DecodeError
from models import WorkerResult
from mybot.common import truncate_with_ellipsis
from settings import settings

MAX_WORKER_NAME_LENGTH = 64


@dataclass
class AggregatedResult:
    image: Image.Image
    attribution: str
    workers: Counter
    decoded: int


def decode_image(payload: str | bytes) -> Image.Image:
    """base64 -> PIL image, fully loaded so that a truncated file fails here"""
    try:
        if isinstance(payload, str):
            payload = "".join(payload.split())
        data = base64.b64decode(payload, validate=True)
        image = Image.open(BytesIO(data))
        image.load()
    except (binascii.Error, ValueError, OSError, Image.DecompressionBombError) as err:
        raise DecodeError(str(err)) from err
    return image


def compose_grid(
    images: Sequence[Image.Image], cell_size: Tuple[int, int], columns: int, padding: int
) -> Image.Image:
    """
    Tile ``images`` left-to-right, top-to-bottom into a ``columns`` wide grid.

    Cells that have no image stay transparent. An empty sequence still gives
    one blank row so that there is always something to send.
    """
    cell_width, cell_height = cell_size
    rows = max(math.ceil(len(images) / columns), 1)

    width = columns * cell_width + (columns - 1) * padding
    height = rows * cell_height + (rows - 1) * padding
    collage = Image.new("RGBA", (width, height), (0, 0, 0, 0))

    for index, image in enumerate(images):
        row, column = divmod(index, columns)
        if image.size != cell_size:
            image = image.resize(cell_size, Image.Resampling.LANCZOS)
        collage.paste(
            image.convert("RGBA"), (column * (cell_width + padding), row * (cell_height + padding))
        )

    return collage


def format_attribution(workers: Counter) -> str:
    """most contributions first, ties keep the order in which workers appeared"""
    names = []
    for name, count in workers.most_common():
        name = truncate_with_ellipsis(name, MAX_WORKER_NAME_LENGTH)
        if count > 1:
            name = f"{name} ({count})"
        names.append(name)
    return ", ".join(names)


class ResultAggregator:
    def __init__(
        self, columns: int = settings.COLLAGE_COLUMNS, padding: int = settings.COLLAGE_PADDING
    ):
        self.columns = columns
        self.padding = padding

    def decode_all(self, payloads: Iterable[str]) -> List[Image.Image]:
        images = []
        for index, payload in enumerate(payloads):
            try:
                images.append(decode_image(payload))
            except DecodeError as err:
                logger.debug(f"Dropped undecodable image #{index}: {err}")
        return images

    def aggregate(self, results: Sequence[WorkerResult], edge: int) -> AggregatedResult:
        workers = Counter(result.worker_name for result in results)
        images = self.decode_all(result.image_base64 for result in results)

        if len(images) < len(results):
            logger.warning(f"{len(results) - len(images)} of {len(results)} images were dropped")

        return AggregatedResult(
            image=compose_grid(images, (edge, edge), self.columns, self.padding),
            attribution=format_attribution(workers),
            workers=workers,
            decoded=len(images),
        )
