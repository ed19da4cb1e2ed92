"""Industry -> influencer search keyword lookup table.

A business's ``industry`` text is matched by substring against the keys
below; every matching category contributes its keywords (so "fashion
ecommerce" collects both sets).  When nothing matches, the generic set is
used so keyword construction never comes back empty.
"""

INDUSTRY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "ecommerce": ("top fashion influencer", "lifestyle blogger 100k", "product reviewer verified", "shopping haul creator"),
    "saas": ("tech startup founder", "software CEO", "SaaS influencer", "tech entrepreneur"),
    "fashion": ("fashion model verified", "celebrity stylist", "fashion week influencer", "style icon"),
    "beauty": ("celebrity makeup artist", "beauty guru verified", "skincare expert", "beauty brand founder"),
    "fitness": ("celebrity trainer", "fitness model verified", "gym owner influencer", "bodybuilding champion"),
    "food": ("celebrity chef", "michelin star chef", "food network star", "restaurant owner influencer"),
    "travel": ("luxury travel blogger", "travel photographer verified", "adventure influencer", "world traveler"),
    "tech": ("tech CEO", "silicon valley influencer", "gadget reviewer verified", "tech founder"),
    "gaming": ("pro gamer", "esports champion", "gaming youtuber verified", "twitch partner"),
    "education": ("education entrepreneur", "online course creator", "edtech founder", "professor influencer"),
    "finance": ("wealth advisor", "investment banker influencer", "finance CEO", "crypto whale"),
    "healthcare": ("celebrity doctor", "medical influencer verified", "wellness founder", "health entrepreneur"),
    "sports": ("professional athlete", "olympic athlete", "sports commentator", "fitness celebrity"),
    "construction": (
        "celebrity architect", "interior design celebrity", "luxury home builder",
        "real estate mogul", "property developer", "home renovation expert", "architectural designer",
    ),
    "real estate": (
        "luxury realtor celebrity", "real estate investor millionaire", "property mogul",
        "mansion tour creator", "real estate entrepreneur",
    ),
    "service": ("business mogul", "entrepreneur verified", "CEO influencer", "industry leader"),
    "luxury": (
        "billionaire lifestyle", "luxury brand ambassador", "affluent influencer",
        "high society influencer", "luxury car collector",
    ),
}

GENERIC_KEYWORDS: tuple[str, ...] = (
    "business mogul",
    "entrepreneur verified",
    "industry leader",
    "CEO influencer",
)

# (audience cues, keywords added when any cue appears in target_audience)
AUDIENCE_KEYWORDS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (
        ("hni", "high-net-worth", "luxury", "affluent"),
        ("luxury lifestyle influencer", "millionaire lifestyle", "high net worth influencer", "affluent living"),
    ),
    (
        ("home", "villa", "property"),
        ("luxury home tour", "mansion tour", "dream home builder", "celebrity home designer"),
    ),
    (
        ("nri", "overseas", "diaspora", "expat"),
        ("diaspora lifestyle influencer", "overseas entrepreneur", "expat creator"),
    ),
)

NICHE_STOPWORDS: frozenset[str] = frozenset(
    {"focus", "with", "that", "this", "from", "have", "been", "their", "building", "and", "for"}
)

# Industry cue -> platforms whose audiences skew toward that industry.
PLATFORM_AFFINITY: tuple[tuple[tuple[str, ...], frozenset[str]], ...] = (
    (("fashion", "beauty", "lifestyle", "food"), frozenset({"instagram"})),
    (("tech", "saas", "business"), frozenset({"linkedin"})),
    (("gaming", "entertainment"), frozenset({"tiktok", "youtube"})),
)
