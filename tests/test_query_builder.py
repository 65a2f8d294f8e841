from models.types import SubTopic, Topic, TouchPoint
from models.requests import FilterOverride
from reporting.query_builder import (
    apply_filter_override,
    build_query_for_all_keywords_string,
    build_query_string,
    select_urls,
    split_tags,
    topic_expression,
)
from reporting.query_expression import QueryExpression, field_terms, terms
from reporting.scope_refiners import (
    build_subtopic_query_string,
    build_touchpoint_query_string,
    subtopic_expression,
    touchpoint_expression,
)

TRAILER = 'NOT source:("DM") AND NOT manual_entry_type:("review")'


def test_keywords_only_topic(store, flood_topic):
    query = build_query_string(store, flood_topic)
    assert query.render() == f'p_message_text:("flood" OR "relief") AND {TRAILER}'


def test_topic_without_terms_matches_nothing():
    query = topic_expression(Topic(topic_id=1))
    assert query.render() == f'p_message_text:() AND {TRAILER}'


def test_missing_topic_is_empty(store):
    assert build_query_string(store, 404).is_empty
    assert build_query_string(store, 404).render() == ""


def test_topic_with_urls_and_exclusions():
    topic = Topic(
        topic_id=1,
        keywords=["relief"],
        hashtags=["#flood"],
        urls=["https://x.com/undp"],
        exclude_words=["spam"],
        exclude_accounts=["bot"],
        sources=["Twitter"],
    )
    assert topic_expression(topic).render() == (
        '(p_message_text:("#flood" OR "relief") OR u_fullname:("#flood" OR "relief")'
        ' OR u_source:("https://x.com/undp") OR p_url:("https://x.com/undp"))'
        ' AND NOT p_message_text:("spam")'
        ' AND NOT u_username:("bot") AND NOT u_source:("bot")'
        ' AND source:("Twitter")'
        f' AND {TRAILER}'
    )


def test_gmaps_url_used_without_urls():
    topic = Topic(topic_id=1, keywords=["cafe"], gmaps_url="https://maps.google.com/x")
    assert topic_expression(topic).render().startswith(
        '(p_message_text:("cafe") OR place_url:("https://maps.google.com/x"))'
    )


def test_scad_tab_filters_only_urls():
    urls = ["https://google.com/maps/a", "https://x.com/b"]
    assert select_urls(urls, True, "GOOGLE") == ["https://google.com/maps/a"]
    assert select_urls(urls, True, "SOCIAL") == ["https://x.com/b"]
    assert select_urls(urls, False, "GOOGLE") == urls
    assert select_urls(urls, True, "GOOGLE", restrict_urls_by_tab=False) == urls


def test_all_keywords_variant_keeps_every_url(store, seed):
    from db.models import CustomerTopic
    seed(CustomerTopic(topic_id=9, topic_keywords='bank', topic_urls='https://google.com/a|https://x.com/b'))

    restricted = build_query_string(store, 9, scad_mode=True, selected_tab="GOOGLE").render()
    everything = build_query_for_all_keywords_string(store, 9, scad_mode=True, selected_tab="GOOGLE").render()
    assert "https://x.com/b" not in restricted
    assert "https://x.com/b" in everything


def test_split_tags():
    assert split_tags("flood, https://x.com/a ,,relief") == (["flood", "relief"], ["https://x.com/a"])


def test_override_tags_replace_topic_expression():
    base = QueryExpression.of(field_terms("p_message_text", ["topic"]))
    override = FilterOverride(tags="flood,https://x.com/a", operator="and", sentimentType="Positive,Negative")

    rendered = apply_filter_override(base, override).render()
    assert rendered == (
        '(p_message_text:("flood" OR "https://x.com/a") OR u_username:("flood")'
        ' OR u_fullname:("flood") OR u_source:("https://x.com/a"))'
        ' AND predicted_sentiment_value:("Positive" OR "Negative")'
    )


def test_override_keywords_only_and_and_operator():
    override = FilterOverride(tags="flood,relief", operator="AND")
    rendered = apply_filter_override(QueryExpression(), override).render()
    assert rendered == '(p_message_text:("flood" AND "relief") OR u_fullname:("flood" AND "relief"))'


def test_override_urls_only():
    override = FilterOverride(tags="https://x.com/a")
    assert apply_filter_override(QueryExpression(), override).render() == 'u_source:("https://x.com/a")'


def test_override_allow_lists_append_one_clause_each():
    base = QueryExpression.of(terms("p_message_text", ["topic"]))
    override = FilterOverride(dataSource="Twitter,Facebook", location="AE", language="null", sentimentType="")

    assert apply_filter_override(base, override).render() == (
        'p_message_text:("topic") AND source:("Twitter" OR "Facebook") AND u_country:("AE")'
    )


def test_subtopic_refiner_defaults_sources_by_monitoring_type():
    subtopic = SubTopic(subtopic_id=3, keywords=["branch"], monitoring_type="media_monitoring")
    rendered = subtopic_expression(subtopic).render()

    assert rendered.startswith('(p_message_text:("branch") OR u_source:("branch") OR u_fullname:("branch"))')
    assert 'source:("khaleej_times" OR "Omanobserver"' in rendered


def test_subtopic_refiner_explicit_sources_and_exclusions():
    subtopic = SubTopic(
        subtopic_id=3,
        keywords=["branch"],
        exclude_keywords=["job"],
        exclude_accounts=["spam"],
        sources=["Twitter"],
        monitoring_type="media_monitoring",
    )
    assert subtopic_expression(subtopic).render() == (
        '(p_message_text:("branch") OR u_source:("branch") OR u_fullname:("branch"))'
        ' AND NOT p_message_text:("job") AND source:("Twitter")'
        ' AND NOT u_username:("spam") AND NOT u_source:("spam") AND NOT u_profile_photo:("spam")'
    )


def test_touchpoint_refiner():
    touchpoint = TouchPoint(touchpoint_id=1, name="ATM", keywords=["atm", "cash machine"])
    assert touchpoint_expression(touchpoint).render() == 'p_message_text:("atm" OR "cash machine")'


def test_missing_refiner_entities_add_nothing(store):
    assert build_subtopic_query_string(store, 99).is_empty
    assert build_touchpoint_query_string(store, 99).is_empty


def test_print_index_rename_touches_every_text_clause():
    query = QueryExpression.of(
        field_terms("p_message_text", ["a"]),
        terms("p_message_text", ["b"], negated=True),
        terms("source", ["News"]),
    )
    assert query.renamed("p_message_text", "p_message").render() == (
        'p_message:("a") AND NOT p_message:("b") AND source:("News")'
    )


def test_expressions_are_immutable():
    base = QueryExpression.of(terms("source", ["Twitter"]))
    extended = base.and_(terms("lange_detect", ["en"]), None)

    assert base.render() == 'source:("Twitter")'
    assert extended.render() == 'source:("Twitter") AND lange_detect:("en")'
    assert base.and_(None) is base
