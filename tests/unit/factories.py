from __future__ import annotations

from core.errors import NotificationError
from domain.value_objects import UploadedFile

PDF = b"%PDF-1.4\n%test\n"


class RecordingNotifier:
    def __init__(self, fail: bool = False, events: list | None = None) -> None:
        self.sent = []
        self.fail = fail
        self.events = events

    def send(self, payload) -> None:
        if self.events is not None:
            self.events.append(("notify", payload.company_name))
        self.sent.append(payload)
        if self.fail:
            raise NotificationError("provider down")


def pdf(name: str) -> UploadedFile:
    return UploadedFile(filename=name, content=PDF, content_type="application/pdf")


def application_data(**overrides) -> dict:
    data = {
        "company_name": "Acme Ltd",
        "full_name": "Jane Doe",
        "email": "jane@x.com",
        "address": "1 High Street, London",
        "phone": "",
        "notes": "",
    }
    data.update(overrides)
    return data


def company_data(directors: int = 1, pscs: int = 0) -> dict:
    return {
        "company_name": "Acme Ltd",
        "office_address": "1 High Street, London",
        "business_activity": "Software consultancy",
        "directors": [
            {"home_address": f"{i} Low Road", "ni_number": f"QQ12345{i}C"} for i in range(directors)
        ],
        "pscs": [
            {"name": f"Owner {i}", "address": "2 Side Street", "nature_of_control": "75%+ shares"}
            for i in range(pscs)
        ],
    }


