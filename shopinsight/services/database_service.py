import logging
from typing import List, Dict, Any, Callable, Optional

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from shopinsight.models.database import SessionLocal, AnalysisRecord, create_tables
from shopinsight.models.schemas import AnalyzeResponse

logger = logging.getLogger(__name__)


class DatabaseService:
    """Analysis history backed by SQLAlchemy"""

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self.session_factory = session_factory or SessionLocal
        if session_factory is None:
            # Ensure tables exist
            create_tables()

    def get_session(self) -> Session:
        """Get database session"""
        return self.session_factory()

    def save_analysis(self, store_key: str, store_url: str, response: AnalyzeResponse) -> int:
        """
        Record a completed analysis

        Args:
            store_key: Normalized store hostname
            store_url: URL as requested
            response: Analysis returned to the client

        Returns:
            int: ID of the saved record
        """
        db = self.get_session()
        try:
            data = response.data
            record = AnalysisRecord(
                store_key=store_key,
                store_url=store_url,
                store_title=response.meta.title,
                total_products=data.stats.total_products,
                average_price=data.stats.average_price,
                health_overall=data.website_health.overall,
                product_score=data.store_scores.product.overall,
                operations_score=data.store_scores.operations.overall,
                marketing_score=data.store_scores.marketing.overall,
                from_cache=response.cache.cached
            )

            db.add(record)
            db.commit()
            logger.info(f"Saved analysis record {record.id} for {store_key}")
            return record.id

        except Exception as e:
            db.rollback()
            logger.error(f"Error saving analysis for {store_key}: {e}")
            raise
        finally:
            db.close()

    def _record_to_dict(self, record: AnalysisRecord) -> Dict[str, Any]:
        return {
            'id': record.id,
            'store_key': record.store_key,
            'store_url': record.store_url,
            'store_title': record.store_title,
            'total_products': record.total_products,
            'average_price': record.average_price,
            'health_overall': record.health_overall,
            'product_score': record.product_score,
            'operations_score': record.operations_score,
            'marketing_score': record.marketing_score,
            'from_cache': record.from_cache,
            'created_at': record.created_at
        }

    def get_recent_analyses(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Get recent store analyses"""
        db = self.get_session()
        try:
            records = db.query(AnalysisRecord).order_by(
                desc(AnalysisRecord.created_at), desc(AnalysisRecord.id)
            ).limit(limit).all()
            return [self._record_to_dict(r) for r in records]

        except Exception as e:
            logger.error(f"Error getting recent analyses: {e}")
            return []
        finally:
            db.close()

    def get_analysis_statistics(self) -> Dict[str, Any]:
        """Get history statistics"""
        db = self.get_session()
        try:
            total = db.query(AnalysisRecord).count()
            average_health = db.query(func.avg(AnalysisRecord.health_overall)).scalar()

            return {
                'total_analyses': total,
                'unique_stores': db.query(func.count(func.distinct(AnalysisRecord.store_key))).scalar() or 0,
                'cache_hits': db.query(AnalysisRecord).filter(AnalysisRecord.from_cache.is_(True)).count(),
                'average_health_score': round(float(average_health), 1) if average_health is not None else 0.0,
                'recent_analyses': self.get_recent_analyses(5)
            }

        except Exception as e:
            logger.error(f"Error getting statistics: {e}")
            return {}
        finally:
            db.close()
