from __future__ import annotations

from core.errors import RecordNotFound
from domain.models import PSC, Company, CompanyDetail, Director
from services.persistence.base import RecordStore


class CompanyDirectory:
    def __init__(self, records: RecordStore) -> None:
        self.records = records

    def list_companies(self) -> list[Company]:
        rows = self.records.select("companies", order_by="created_at", descending=True)
        return [Company.model_validate(r) for r in rows]

    def get_company(self, company_id: str) -> CompanyDetail:
        rows = self.records.select("companies", {"id": company_id})
        if not rows:
            raise RecordNotFound(f"company {company_id} not found")
        directors = self.records.select("directors", {"company_id": company_id}, order_by="created_at")
        pscs = self.records.select("pscs", {"company_id": company_id}, order_by="created_at")
        return CompanyDetail(
            company=Company.model_validate(rows[0]),
            directors=[Director.model_validate(d) for d in directors],
            pscs=[PSC.model_validate(p) for p in pscs],
        )
