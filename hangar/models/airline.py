"""
Airline model - operators resolved from flight identifiers.

Keyed for lookup by IATA code. Rows are never deleted; name and ICAO code
may be back-filled after creation, the IATA code never changes.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from hangar.models.base import Base, utcnow, isoformat


class CodeSource:
    """Provenance of an entity's identifying code."""
    PROVIDED = 'provided'    # taken verbatim from the inbound payload
    REFERENCE = 'reference'  # derived from the static mapping tables
    LOOKUP = 'lookup'        # derived from the airport info service
    SYNTHETIC = 'synthetic'  # fabricated by a fallback heuristic


class Airline(Base):
    """
    Airline identified by its IATA code.

    Fields:
        iata_code: Upper-case commercial code (e.g., 'EK'); unique
        icao_code: Upper-case ICAO code (e.g., 'UAE'); unique if present
        code_source: How iata_code was obtained (see CodeSource)
    """

    __tablename__ = 'airlines'

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment='Airline name'
    )

    iata_code: Mapped[str] = mapped_column(
        String(3),
        unique=True,
        nullable=False,
        comment='IATA airline code (e.g., EK)'
    )

    icao_code: Mapped[Optional[str]] = mapped_column(
        String(8),
        unique=True,
        nullable=True,
        comment='ICAO airline code (e.g., UAE)'
    )

    logo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    code_source: Mapped[str] = mapped_column(
        String(16),
        default=CodeSource.REFERENCE,
        comment='Provenance of iata_code'
    )

    # Metadata
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f'<Airline {self.iata_code} {self.name}>'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'iataCode': self.iata_code,
            'icaoCode': self.icao_code,
            'logoUrl': self.logo_url,
            'codeSource': self.code_source,
            'createdAt': isoformat(self.created_at),
        }
