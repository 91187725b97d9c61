import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from autoblog.models import Article

logger = logging.getLogger(__name__)

SAMPLE_ARTICLES = [
    {
        "title": "Building Product-Led Growth in B2B SaaS",
        "content": (
            "Product-Led Growth (PLG) has become the dominant go-to-market strategy for modern "
            "B2B SaaS companies. Unlike traditional sales-led approaches, PLG focuses on delivering "
            "immediate value through the product itself, allowing users to experience core "
            "functionality before committing to a purchase. Successful PLG implementations require "
            "seamless onboarding flows, in-app guidance, and freemium models that showcase your "
            "product's unique value proposition. Key metrics to track include time-to-value, feature "
            "adoption rates, and conversion from free to paid tiers. Companies like Slack, Notion, "
            "and Figma have demonstrated that when done right, PLG can dramatically reduce customer "
            "acquisition costs while increasing organic growth through viral loops and word-of-mouth "
            "referrals."
        ),
    },
    {
        "title": "Decentralized Storage Networks: The Foundation of Web3 Infrastructure",
        "content": (
            "Decentralized storage networks like IPFS, Arweave, and Filecoin are revolutionizing how "
            "data is stored and accessed on the internet. Unlike traditional cloud storage, these "
            "networks distribute data across thousands of nodes, eliminating single points of "
            "failure and reducing censorship risks. IPFS (InterPlanetary File System) uses "
            "content-addressing to create a distributed web where files are identified by their "
            "cryptographic hash rather than location. Arweave offers permanent storage through a "
            "novel consensus mechanism called Proof of Access, while Filecoin creates a marketplace "
            "for storage providers. These technologies are critical infrastructure for Web3 "
            "applications, enabling decentralized social networks, NFT marketplaces, and "
            "blockchain-based applications that require reliable, censorship-resistant data storage."
        ),
    },
    {
        "title": "Customer Success Metrics That Drive B2B SaaS Retention",
        "content": (
            "In B2B SaaS, customer retention is the lifeblood of sustainable growth. While "
            "acquisition metrics get attention, retention metrics directly impact revenue and "
            "profitability. Key indicators include Net Revenue Retention (NRR), which measures "
            "expansion revenue from existing customers, and Customer Lifetime Value (LTV) to "
            "Customer Acquisition Cost (CAC) ratios. Product engagement scores, feature adoption "
            "rates, and time-to-first-value are leading indicators of churn risk. Successful SaaS "
            "companies implement health scoring systems that combine product usage, support ticket "
            "volume, and payment behavior to identify at-risk accounts early. Proactive outreach, "
            "personalized onboarding, and strategic account management can turn potential churn "
            "into expansion opportunities, transforming satisfied customers into advocates who "
            "drive referrals and case studies."
        ),
    },
]


def insert_article(db: Session, title: str, content: str) -> int:
    db_article = Article(title=title, content=content)
    db.add(db_article)
    db.commit()
    return db_article.id


def fetch_all(db: Session) -> List[Article]:
    return db.query(Article).order_by(Article.created_at.desc(), Article.id.desc()).all()


def fetch_by_id(db: Session, article_id: int) -> Optional[Article]:
    return db.query(Article).filter(Article.id == article_id).first()


def count_all(db: Session) -> int:
    return db.query(func.count(Article.id)).scalar() or 0


def seed_if_empty(db: Session) -> int:
    """Insert the sample articles when the table is empty.

    Returns the number of rows inserted, which is 0 on every run after the
    first one.
    """
    if count_all(db) > 0:
        return 0
    db.add_all([Article(title=s["title"], content=s["content"]) for s in SAMPLE_ARTICLES])
    db.commit()
    logger.info("Seeded %s initial articles", len(SAMPLE_ARTICLES))
    return len(SAMPLE_ARTICLES)
