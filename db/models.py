"""
SQLAlchemy models for the configuration store: topics, sub-topics,
touch points, customers, label overrides, omit words and cached word clouds.

List-valued settings are stored as delimited strings, the way the topic
editor writes them (keywords by ``,``; hashtags and URLs by ``|``).
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CustomerTopic(Base):
    __tablename__ = 'customer_topics'
    topic_id = Column(Integer, primary_key=True)
    topic_title = Column(String)
    topic_keywords = Column(Text, default='')
    topic_hash_tags = Column(Text, default='')
    topic_urls = Column(Text)
    topic_exclude_words = Column(Text)
    topic_exclude_accounts = Column(Text)
    topic_data_source = Column(Text)
    topic_data_location = Column(Text)
    topic_data_lang = Column(Text)
    topic_gmaps_url = Column(Text)
    topic_user_id = Column(Integer, index=True)
    topic_order = Column(Integer, default=0)
    topic_is_deleted = Column(String(1), default='N')
    customer_portal = Column(String)


class CustomerExperience(Base):
    __tablename__ = 'customer_experience'
    exp_id = Column(Integer, primary_key=True)
    exp_name = Column(String)
    exp_keywords = Column(Text, default='')
    exp_exclude_keywords = Column(Text)
    exp_exclude_accounts = Column(Text)
    exp_source = Column(Text)
    exp_type = Column(String)


class TouchPointRow(Base):
    __tablename__ = 'touch_points'
    tp_id = Column(Integer, primary_key=True)
    tp_name = Column(String)
    tp_keywords = Column(Text, default='')


class CxTouchPoint(Base):
    __tablename__ = 'cx_touch_points'
    cx_tp_id = Column(Integer, primary_key=True)
    cx_tp_cx_id = Column(Integer, index=True)
    cx_tp_tp_id = Column(Integer, index=True)


class Customer(Base):
    __tablename__ = 'customers'
    customer_id = Column(Integer, primary_key=True)
    customer_reviews_key = Column(String)


class CustomerLabelData(Base):
    __tablename__ = 'customers_label_data'
    label_id = Column(Integer, primary_key=True)
    p_id = Column(String, index=True)
    predicted_sentiment_value_requested = Column(String)
    created_at = Column(DateTime, default=datetime.now)


class OmitWord(Base):
    __tablename__ = 'omit_words'
    id = Column(Integer, primary_key=True)
    word = Column(String, nullable=False)


class WordCloudSubTopic(Base):
    """Cached word clouds keyed by sub-topic"""
    __tablename__ = 'wordcloud_data'
    wc_id = Column(Integer, primary_key=True)
    wc_stid = Column(Integer, nullable=False)
    wc_str = Column(Text)
    wc_str_sorted = Column(Text)
    wc_time = Column(DateTime, default=datetime.now)

    __table_args__ = (
        UniqueConstraint('wc_stid', name='uq_wordcloud_subtopic'),
    )


class WordCloudTopic(Base):
    """Cached word clouds keyed by topic"""
    __tablename__ = 'wordcloud_cx_data'
    wc_id = Column(Integer, primary_key=True)
    wc_tid = Column(Integer, nullable=False)
    wc_str = Column(Text)
    wc_str_sorted = Column(Text)
    wc_time = Column(DateTime, default=datetime.now)

    __table_args__ = (
        UniqueConstraint('wc_tid', name='uq_wordcloud_topic'),
    )
