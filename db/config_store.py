"""
Read-mostly access to the configuration store.

The only write path is the word-cloud upsert. Every public method opens
and closes its own session, so one store instance can be shared across
request threads.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional, Set

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from db.models import (
    CustomerTopic, CustomerExperience, TouchPointRow, CxTouchPoint, Customer,
    CustomerLabelData, OmitWord, WordCloudSubTopic, WordCloudTopic
)
from models.types import Topic, SubTopic, TouchPoint, CachedWordCloud

logger = logging.getLogger(__name__)


def split_setting(value: Optional[str], delimiter: str = ',') -> List[str]:
    """Split a delimited setting into trimmed, non-empty entries"""
    if not value:
        return []
    return [part.strip() for part in value.split(delimiter) if part.strip()]


class ConfigStore:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def session(self):
        session = self.session_factory()
        try:
            yield session
        finally:
            session.close()

    def get_topic(self, topic_id: int) -> Optional[Topic]:
        with self.session() as session:
            row = session.get(CustomerTopic, topic_id)
            if row is None:
                return None
            return Topic(
                topic_id=row.topic_id,
                keywords=split_setting(row.topic_keywords, ','),
                hashtags=split_setting(row.topic_hash_tags, '|'),
                urls=split_setting(row.topic_urls, '|'),
                exclude_words=split_setting(row.topic_exclude_words, ','),
                exclude_accounts=split_setting(row.topic_exclude_accounts, ','),
                sources=split_setting(row.topic_data_source, ','),
                locations=split_setting(row.topic_data_location, ','),
                languages=split_setting(row.topic_data_lang, ','),
                gmaps_url=(row.topic_gmaps_url or None),
            )

    def list_user_topic_ids(self, user_id: int, portal: str = 'D24') -> List[int]:
        """Ids of a user's live topics in display order"""
        with self.session() as session:
            stmt = (
                select(CustomerTopic.topic_id)
                .where(CustomerTopic.topic_user_id == user_id)
                .where(CustomerTopic.customer_portal == portal)
                .where(CustomerTopic.topic_is_deleted != 'Y')
                .order_by(CustomerTopic.topic_order.asc())
            )
            return list(session.scalars(stmt))

    def get_subtopic(self, subtopic_id: int) -> Optional[SubTopic]:
        with self.session() as session:
            row = session.get(CustomerExperience, subtopic_id)
            if row is None:
                return None
            return SubTopic(
                subtopic_id=row.exp_id,
                keywords=[k.replace('"', '') for k in split_setting(row.exp_keywords, ',')],
                exclude_keywords=split_setting(row.exp_exclude_keywords, ','),
                exclude_accounts=split_setting(row.exp_exclude_accounts, ','),
                sources=split_setting(row.exp_source, ','),
                monitoring_type=row.exp_type,
            )

    def get_touchpoint(self, touchpoint_id: int) -> Optional[TouchPoint]:
        with self.session() as session:
            row = session.get(TouchPointRow, touchpoint_id)
            if row is None:
                return None
            return TouchPoint(
                touchpoint_id=row.tp_id,
                name=row.tp_name or '',
                keywords=split_setting(row.tp_keywords, ','),
            )

    def get_subtopic_touchpoints(self, subtopic_id: int) -> List[TouchPoint]:
        """Touch points linked to a sub-topic, in link order"""
        with self.session() as session:
            stmt = (
                select(TouchPointRow)
                .join(CxTouchPoint, CxTouchPoint.cx_tp_tp_id == TouchPointRow.tp_id)
                .where(CxTouchPoint.cx_tp_cx_id == subtopic_id)
                .order_by(CxTouchPoint.cx_tp_id.asc())
            )
            return [
                TouchPoint(
                    touchpoint_id=row.tp_id,
                    name=row.tp_name or '',
                    keywords=split_setting(row.tp_keywords, ','),
                )
                for row in session.scalars(stmt)
            ]

    def get_customer_review_key(self, account_id) -> Optional[str]:
        """Review index identifier of a parent account, if it has one"""
        try:
            customer_id = int(account_id)
        except (TypeError, ValueError):
            return None
        with self.session() as session:
            row = session.get(Customer, customer_id)
            if row is None or not row.customer_reviews_key:
                return None
            return row.customer_reviews_key

    def get_omit_words(self) -> Set[str]:
        with self.session() as session:
            return set(session.scalars(select(OmitWord.word)))

    def get_label_override(self, p_id: str) -> Optional[str]:
        """Most recent manual sentiment label for a document"""
        if not p_id:
            return None
        with self.session() as session:
            stmt = (
                select(CustomerLabelData)
                .where(CustomerLabelData.p_id == str(p_id))
                .order_by(CustomerLabelData.label_id.desc())
                .limit(1)
            )
            row = session.scalars(stmt).first()
            if row is None:
                return None
            return row.predicted_sentiment_value_requested or ''

    # Word cloud cache

    @staticmethod
    def _word_cloud_table(by_subtopic: bool):
        if by_subtopic:
            return WordCloudSubTopic, WordCloudSubTopic.wc_stid
        return WordCloudTopic, WordCloudTopic.wc_tid

    def get_word_cloud(self, key: int, by_subtopic: bool = False) -> Optional[CachedWordCloud]:
        table, key_column = self._word_cloud_table(by_subtopic)
        with self.session() as session:
            row = session.scalars(select(table).where(key_column == key)).first()
            if row is None:
                return None
            return CachedWordCloud(
                key=key,
                sorted_json=row.wc_str_sorted,
                shuffled_json=row.wc_str,
                computed_at=row.wc_time,
            )

    def upsert_word_cloud(self, key: int, sorted_json: str, shuffled_json: str,
                          by_subtopic: bool = False, computed_at: datetime = None) -> None:
        """Insert or refresh the single cached row for ``key``; last writer wins"""
        table, key_column = self._word_cloud_table(by_subtopic)
        computed_at = computed_at or datetime.now()
        values = {'wc_str': shuffled_json, 'wc_str_sorted': sorted_json, 'wc_time': computed_at}

        with self.session() as session:
            row = session.scalars(select(table).where(key_column == key)).first()
            if row is None:
                session.add(table(**{key_column.key: key}, **values))
            else:
                for name, value in values.items():
                    setattr(row, name, value)
            try:
                session.commit()
                return
            except IntegrityError:
                # A concurrent request inserted the row first
                session.rollback()
                logger.info(f"Word cloud row for {key} created concurrently, updating instead")

            row = session.scalars(select(table).where(key_column == key)).one()
            for name, value in values.items():
                setattr(row, name, value)
            session.commit()
