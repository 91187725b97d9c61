import os
import logging
from datetime import datetime

import requests
import streamlit as st
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

API_BASE = os.getenv("AUTOBLOG_API_BASE", "http://localhost:4000")
DEFAULT_TOPIC = "B2B SaaS and open-source Web3 infrastructure"

st.set_page_config(page_title="Autoblog", layout="wide")


# ---------------------------
# Helpers
# ---------------------------
def api_request(method: str, path: str, payload: dict | None = None, timeout: int = 60):
    url = f"{API_BASE}{path}"
    r = requests.request(method, url, json=payload, timeout=timeout)
    if r.status_code >= 400:
        raise RuntimeError(f"{method.upper()} {path} failed: {r.status_code} {r.text}")
    return r.json() if r.text else None


def list_articles() -> list[dict]:
    return api_request("get", "/api/articles") or []


def get_article(article_id: int) -> dict:
    return api_request("get", f"/api/articles/{article_id}")


def generate_article(topic: str) -> dict:
    # Generation may walk through several models, each with its own timeout.
    return api_request("post", "/api/articles/generate", {"topic": topic}, timeout=200)


def ai_diagnostics() -> dict:
    return api_request("get", "/api/articles/diagnostics/ai", timeout=60)


def format_date(value: str | None, fmt: str = "%b %d, %Y") -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value).strftime(fmt)
    except ValueError:
        return value


# ---------------------------
# Sidebar: article list
# ---------------------------
st.sidebar.title("Autoblog")

try:
    articles = list_articles()
except Exception as e:
    logger.error("Failed to fetch articles: %s", e)
    st.sidebar.error("Failed to load articles.")
    articles = []

st.sidebar.caption(f"{len(articles)} articles")
if not articles:
    st.sidebar.info("No articles yet")

if articles and "selected_id" not in st.session_state:
    st.session_state.selected_id = articles[0]["id"]

for art in articles:
    label = f"{art['title']} · {format_date(art.get('created_at'))}"
    if st.sidebar.button(label, key=f"art_{art['id']}"):
        st.session_state.selected_id = art["id"]

st.sidebar.markdown("---")
st.sidebar.caption(f"Backend: {API_BASE}")

# ---------------------------
# Generate
# ---------------------------
with st.form("generate_form"):
    topic = st.text_input("Topic", value=DEFAULT_TOPIC)
    submitted = st.form_submit_button("Generate article")
if submitted:
    with st.spinner("Generating..."):
        try:
            created = generate_article(topic.strip() or DEFAULT_TOPIC)
            st.session_state.selected_id = created["id"]
            st.success(f"Created: {created['title']}")
            st.rerun()
        except Exception as e:
            st.error(str(e))

# ---------------------------
# Reading pane
# ---------------------------
selected_id = st.session_state.get("selected_id")
if selected_id is None:
    st.write("Select an article to read")
else:
    try:
        article = get_article(selected_id)
        st.header(article["title"])
        st.caption(format_date(article.get("created_at"), "%B %d, %Y"))
        st.markdown(article["content"])
    except Exception as e:
        st.error(str(e))

with st.expander("AI diagnostics"):
    if st.button("Run diagnostics"):
        try:
            st.json(ai_diagnostics())
        except Exception as e:
            st.error(str(e))
