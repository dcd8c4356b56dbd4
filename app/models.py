# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/20 14:10
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    :
"""
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class HordeModelPreset(BaseModel):
    """One Stable Horde model exposed as a bot command"""

    model_config = ConfigDict(frozen=True)

    command_names: List[str] = Field(description="第一个名称为主命令，其余为别名")
    description: str
    model: str = Field(description="Stable Horde 上的模型名称")
    size: int = Field(description="生成图片的边长（像素）")


class Job(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable Horde 返回的 request id")
    user_id: int | str
    prompt: str
    model: str
    size: int


class JobStatus(BaseModel):
    """Snapshot of the queue state of a job, compared by value"""

    model_config = ConfigDict(frozen=True)

    waiting: int = 0
    processing: int = 0
    finished: int = 0
    queue_position: int = 0
    wait_time: int = Field(default=0, description="预计剩余时间（秒）")
    done: bool = False


class WorkerResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    worker_name: str
    image_base64: str


class PollState(str, Enum):
    POLLING = "polling"
    DONE = "done"


class ProgressUpdate(BaseModel):
    """A progress message the poll loop decided to show"""

    model_config = ConfigDict(frozen=True)

    status: JobStatus
    long_wait: bool = Field(default=False, description="是否附加志愿者提示")
    first: bool = Field(default=False, description="第一次更新需要发送新消息，之后原地编辑")
