from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, Optional

import requests
from google.cloud import bigquery

from .schemas import RentVsBuyInputs

logger = logging.getLogger(__name__)


class DataSourceError(RuntimeError):
    """A remote data source returned nothing usable for the requested metro."""


@dataclass(frozen=True)
class LocationFinancialDefaults:
    """Metro-level (CBSA) housing figures assembled from ACS + HMDA."""

    cbsa: str
    name: str
    median_rent: float  # monthly
    property_value: float
    loan_amount: float
    interest_rate: float  # annual percentage, e.g., 6.25
    annual_property_taxes: float = 0.0

    @property
    def down_payment_pct(self) -> float:
        if self.property_value <= 0:
            return 0.0
        loan_to_value = min(self.loan_amount / self.property_value, 1.0)
        return (1 - loan_to_value) * 100

    @property
    def property_tax_pct(self) -> float:
        if self.property_value <= 0:
            return 0.0
        return self.annual_property_taxes / self.property_value * 100

    def to_rent_vs_buy_inputs(
        self, base: Optional[RentVsBuyInputs] = None
    ) -> RentVsBuyInputs:
        """
        Overlay the location figures onto ``base``.

        Only figures the data sources actually produced (positive values) are
        applied; every other assumption is carried over from ``base``.
        """
        base = base or RentVsBuyInputs()
        overrides: Dict[str, float] = {}
        if self.median_rent > 0:
            overrides["monthly_rent"] = self.median_rent
        if self.property_value > 0:
            overrides["home_price"] = self.property_value
            if self.loan_amount > 0:
                overrides["down_payment_pct"] = self.down_payment_pct
            if self.annual_property_taxes > 0:
                overrides["property_tax_pct"] = self.property_tax_pct
        if self.interest_rate > 0:
            overrides["mortgage_rate_pct"] = self.interest_rate
        return replace(base, **overrides)


class CensusACSClient:
    """Thin wrapper around the Census API for ACS pulls."""

    BASE_URL = "https://api.census.gov/data"
    GEO_KEY = "metropolitan statistical area/micropolitan statistical area"

    ACS_METRICS: Dict[str, str] = {
        "median_rent": "B25064_001E",  # median gross rent, monthly
        "median_home_value": "B25077_001E",
        "real_estate_taxes": "B25103_001E",  # median taxes paid, annual
    }

    def __init__(
        self,
        api_key: Optional[str],
        dataset: str = "acs/acs5",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.dataset = dataset
        self.session = session or requests.Session()

    def fetch_housing_metrics(self, cbsa: str, *, year: int = 2023) -> Dict[str, float]:
        columns = ["NAME"] + sorted(self.ACS_METRICS.values())
        params = {
            "get": ",".join(columns),
            "for": f"{self.GEO_KEY}:{cbsa}",
        }
        if self.api_key:
            params["key"] = self.api_key

        url = f"{self.BASE_URL}/{year}/{self.dataset}"
        logger.debug("ACS request %s for CBSA %s", url, cbsa)
        response = self.session.get(url, params=params, timeout=30)
        response.raise_for_status()
        data = response.json()
        if len(data) < 2:
            logger.warning("ACS %s returned no rows for CBSA %s", year, cbsa)
            raise DataSourceError(f"ACS query returned no rows for CBSA {cbsa}")

        row = dict(zip(data[0], data[1]))
        metrics: Dict[str, float] = {"name": row.get("NAME", f"CBSA {cbsa}")}
        for key, column in self.ACS_METRICS.items():
            value = _to_float(row.get(column))
            metrics[key] = value if value is not None and value > 0 else 0.0
        return metrics


@dataclass(frozen=True)
class PurchaseLoanSummary:
    """Typical home-purchase mortgage in a metro, from HMDA filings."""

    metro_name: Optional[str]
    property_value: float
    loan_amount: float
    interest_rate: float  # annual percentage


class HMDAClient:
    """Summarise first-lien home-purchase loans from the public HMDA BigQuery tables."""

    # loan_purpose 1 = home purchase, lien_status 1 = first lien
    PURCHASE_QUERY = """
        SELECT
          ANY_VALUE(derived_msa_md_name) AS metro_name,
          APPROX_QUANTILES(CAST(property_value AS FLOAT64), 2)[OFFSET(1)] AS property_value,
          APPROX_QUANTILES(CAST(loan_amount AS FLOAT64), 2)[OFFSET(1)] AS loan_amount,
          AVG(CAST(interest_rate AS FLOAT64)) AS interest_rate,
          COUNT(*) AS loans
        FROM `{table}`
        WHERE as_of_year = @year
          AND CAST(derived_msa_md AS STRING) = @cbsa
          AND CAST(loan_purpose AS STRING) = '1'
          AND CAST(lien_status AS STRING) = '1'
          AND SAFE_CAST(property_value AS FLOAT64) > 0
          AND SAFE_CAST(interest_rate AS FLOAT64) > 0
    """

    def __init__(
        self,
        *,
        table: str,
        client: Optional[bigquery.Client] = None,
        project: Optional[str] = None,
    ) -> None:
        self.table = table
        self.client = client if client is not None else bigquery.Client(project=project)

    def fetch_purchase_summary(self, cbsa: str, *, year: int = 2023) -> PurchaseLoanSummary:
        job_config = bigquery.QueryJobConfig(
            query_parameters=[
                bigquery.ScalarQueryParameter("year", "INT64", year),
                bigquery.ScalarQueryParameter("cbsa", "STRING", cbsa),
            ]
        )
        logger.debug("HMDA query against %s for CBSA %s (%s)", self.table, cbsa, year)
        job = self.client.query(self.PURCHASE_QUERY.format(table=self.table), job_config=job_config)
        rows = list(job.result())
        # The aggregate always yields one row; zero matching loans shows up as loans == 0.
        if not rows or not rows[0].get("loans"):
            logger.warning("HMDA %s has no purchase loans for CBSA %s", year, cbsa)
            raise DataSourceError(f"No HMDA purchase loans for CBSA {cbsa} in {self.table}")
        row = rows[0]
        return PurchaseLoanSummary(
            metro_name=row.get("metro_name"),
            property_value=row.get("property_value") or 0.0,
            loan_amount=row.get("loan_amount") or 0.0,
            interest_rate=row.get("interest_rate") or 0.0,
        )


@dataclass
class LocationDataAssembler:
    """Combine ACS and HMDA pulls into a single defaults object."""

    acs_client: CensusACSClient
    hmda_client: HMDAClient

    def build_defaults(
        self,
        cbsa: str,
        *,
        acs_year: int = 2023,
        hmda_year: int = 2023,
    ) -> LocationFinancialDefaults:
        acs_metrics = self.acs_client.fetch_housing_metrics(cbsa, year=acs_year)
        loans = self.hmda_client.fetch_purchase_summary(cbsa, year=hmda_year)

        return LocationFinancialDefaults(
            cbsa=cbsa,
            name=loans.metro_name or acs_metrics.get("name") or f"CBSA {cbsa}",
            median_rent=acs_metrics.get("median_rent", 0.0),
            # HMDA reflects recent purchases; ACS self-reported value is the fallback.
            property_value=loans.property_value or acs_metrics.get("median_home_value", 0.0),
            loan_amount=loans.loan_amount,
            interest_rate=loans.interest_rate,
            annual_property_taxes=acs_metrics.get("real_estate_taxes", 0.0),
        )


def _to_float(value: Optional[str]) -> Optional[float]:
    if value in (None, "", "null"):
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"Could not convert ACS value '{value}' to float") from exc
