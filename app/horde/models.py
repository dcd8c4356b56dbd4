# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/20 15:02
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Request and response bodies of the Stable Horde v2 API
"""
from typing import List

from pydantic import BaseModel, Field

from models import JobStatus, WorkerResult


class GenerationParams(BaseModel):
    width: int
    height: int
    n: int = Field(default=4, description="请求的图片数量")


class GenerationPayload(BaseModel):
    prompt: str
    params: GenerationParams
    models: List[str]
    r2: bool = Field(default=False, description="False 时结果以 base64 webp 内联返回，而不是 R2 链接")
    nsfw: bool = False
    censor_nsfw: bool = True

    @classmethod
    def build(cls, prompt: str, model: str, size: int, n: int = 4) -> "GenerationPayload":
        return cls(
            prompt=prompt, params=GenerationParams(width=size, height=size, n=n), models=[model]
        )


class AsyncSubmitResponse(BaseModel):
    id: str | None = None
    message: str | None = Field(default=None, description="请求被拒绝时的原因")
    kudos: float | None = None


class RequestCheck(BaseModel):
    finished: int = 0
    processing: int = 0
    restarted: int = 0
    waiting: int = 0
    done: bool = False
    faulted: bool = False
    wait_time: int = 0
    queue_position: int = 0
    kudos: float | None = None
    is_possible: bool = True

    def to_status(self) -> JobStatus:
        return JobStatus(
            waiting=self.waiting,
            processing=self.processing,
            finished=self.finished,
            queue_position=self.queue_position,
            wait_time=self.wait_time,
            done=self.done,
        )


class Generation(BaseModel):
    worker_id: str | None = None
    worker_name: str
    model: str | None = None
    img: str
    seed: str | None = None

    def to_result(self) -> WorkerResult:
        return WorkerResult(worker_name=self.worker_name, image_base64=self.img)


class RequestStatus(RequestCheck):
    generations: List[Generation] = Field(default_factory=list)
