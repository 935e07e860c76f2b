from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from ..enums import HeartbeatStatus
from .base import Envelope, ListEnvelope, _Attributes, _DataBase


# region Machines

class MachineSchema(Envelope):
    # schema for /accounts/<account>/machines/<id>
    data: MachineData


class MachinesSchema(ListEnvelope):
    # schema for /accounts/<account>/machines
    data: list[MachineData] = []


class MachineData(_DataBase):
    kind = 'machines'
    attributes: MachineAttributes


class MachineAttributes(_Attributes):
    fingerprint: str
    name: Optional[str] = None
    platform: Optional[str] = None
    hostname: Optional[str] = None
    ip: Optional[str] = None
    cores: Optional[int] = None
    memory: Optional[int] = None
    disk: Optional[int] = None
    require_heartbeat: bool = False
    heartbeat_status: HeartbeatStatus = HeartbeatStatus.NotStarted
    heartbeat_duration: Optional[int] = None
    last_heartbeat: Optional[datetime] = None
    next_heartbeat: Optional[datetime] = None
    metadata: dict = {}
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion

# region Processes

class ProcessSchema(Envelope):
    data: ProcessData


class ProcessesSchema(ListEnvelope):
    data: list[ProcessData] = []


class ProcessData(_DataBase):
    kind = 'processes'
    attributes: ProcessAttributes


class ProcessAttributes(_Attributes):
    pid: Union[int, str]
    name: Optional[str] = None
    platform: Optional[str] = None
    status: Optional[str] = None
    last_heartbeat: Optional[datetime] = None
    metadata: dict = {}
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion

# region Components

class ComponentSchema(Envelope):
    data: ComponentData


class ComponentsSchema(ListEnvelope):
    data: list[ComponentData] = []


class ComponentData(_DataBase):
    kind = 'components'
    attributes: ComponentAttributes


class ComponentAttributes(_Attributes):
    name: str
    fingerprint: str
    metadata: dict = {}
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


# endregion
