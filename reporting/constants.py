"""
Fixed vocabularies of the labelled document index.

Category names must match the values written by the labelling pipeline
exactly, including their spelling.
"""

GOOGLE_TAB = "GOOGLE"

# Always appended to topic expressions
EXCLUDED_SOURCES = ("DM",)
EXCLUDED_ENTRY_TYPES = ("review",)

MENTION_TYPES = ("Customer Complaint", "Inquiry", "Praise", "Suggestion", "Product Feedback")

SOCIAL_TRIPLE = (
    ("twitterContent", "Twitter"),
    ("facebookContent", "Facebook"),
    ("instagramContent", "Instagram"),
)
SOCIAL_TRIPLE_SOURCES = tuple(source for _, source in SOCIAL_TRIPLE)

SENTIMENTS = ("Positive", "Negative", "Neutral")

# Sub-topic default sources by monitoring type
SOCIAL_MONITORING_SOURCES = (
    "Twitter", "Youtube", "Linkedin", "Pinterest", "Reddit", "Tumblr", "Vimeo", "Instagram", "Facebook",
)
MEDIA_MONITORING_SOURCES = (
    "khaleej_times", "Omanobserver", "Time of oman", "Blogs", "FakeNews", "News", "Web",
)
MONITORING_TYPE_SOURCES = {
    "cx_monitoring": SOCIAL_MONITORING_SOURCES,
    "campaign_monitoring": SOCIAL_MONITORING_SOURCES,
    "media_monitoring": MEDIA_MONITORING_SOURCES,
}

# SCAD mode source restrictions
SCAD_GOOGLE_SOURCES = ("GoogleMyBusiness",)
SCAD_SOCIAL_SOURCES = ("Twitter", "Facebook", "Instagram")
SCAD_EXTENDED_SOCIAL_SOURCES = (
    "Twitter", "Facebook", "Instagram", "Youtube", "Linkedin", "Pinterest", "Web", "Vimeo", "News",
)
MENTIONS_SOCIAL_SOURCES = ("Twitter", "Facebook", "Instagram", "Linkedin", "Pinterest", "Reddit", "Web")

# Display source name -> indexed source values
SOURCE_ALIASES = {
    "Youtube": ("Youtube", "Vimeo"),
    "Web": ("FakeNews", "News", "Blogs", "Web"),
}


def source_values(source):
    return SOURCE_ALIASES.get(source, (source,))


CHANNEL_SOURCES = (
    ("YouTube", ("Youtube", "Vimeo")),
    ("News", ("FakeNews", "News")),
    ("Twitter", ("Twitter",)),
    ("Pinterest", ("Pinterest",)),
    ("Instagram", ("Instagram",)),
    ("Blogs", ("Blogs",)),
    ("Reddit", ("Reddit",)),
    ("Tumblr", ("Tumblr",)),
    ("Facebook", ("Facebook",)),
    ("Web", ("Web",)),
    ("GoogleMaps", ("GoogleMaps",)),
    ("Tripadvisor", ("Tripadvisor",)),
    ("Linkedin", ("Linkedin",)),
    ("Tiktok", ("Tiktok",)),
    ("GoogleMyBusiness", ("GoogleMyBusiness",)),
)
SCAD_GOOGLE_CHANNEL_SOURCES = (("GoogleMyBusiness", ("GoogleMyBusiness",)),)
SCAD_SOCIAL_CHANNEL_SOURCES = (
    ("Twitter", ("Twitter",)),
    ("Instagram", ("Instagram",)),
    ("Facebook", ("Facebook",)),
    ("Linkedin", ("Linkedin",)),
    ("Pinterest", ("Pinterest",)),
    ("Reddit", ("Reddit",)),
    ("Web", ("Web",)),
    ("Youtube", ("Youtube",)),
)

CHANNEL_SENTIMENT_SOURCES = (
    "Youtube", "Twitter", "Pinterest", "Instagram", "Reddit", "Tumblr", "Facebook", "Web", "Linkedin",
    "GooglePlayStore", "GoogleMyBusiness", "AppleAppStore", "HuaweiAppGallery", "Glassdoor",
)
SCAD_SOCIAL_SENTIMENT_SOURCES = ("Twitter", "Instagram", "Facebook", "Linkedin", "Pinterest", "Reddit", "Web", "Youtube")

# Review sources, served for review customers only
REVIEW_CUSTOMER_IDS = ("292", "309", "310", "312", "412", "420")
REVIEW_SOURCES = (
    "GooglePlayStore", "GoogleMyBusiness", "AppleAppStore", "HuaweiAppGallery", "Glassdoor", "Zomato", "Talabat",
)
REVIEW_SOURCES_SKIPPED = ("GooglePlayStore",)
REVIEW_SENTIMENT_SOURCES = ("GooglePlayStore", "GoogleMyBusiness", "AppleAppStore", "HuaweiAppGallery", "Glassdoor")

# Print media metric targets the print index with this field renamed
PRINT_MESSAGE_FIELD = ("p_message_text", "p_message")

AVE_SOURCES = ("khaleej_times", "Omanobserver", "Time of oman", "Blogs", "FakeNews", "News")
AVE_DIGITAL_MULTIPLIER = 735.76
AVE_CONVENTIONAL_MULTIPLIER = 3276.45

BANKING_TOUCHPOINTS = (
    "Physical Branches and ATMs",
    "Digital Channels",
    "Customer Service Centers",
    "Financial Advisors",
    "Marketing Channels",
    "Community Initiatives",
    "Partner Networks",
    "Self-Service Portals",
    "Other",
)

UN_TOUCHPOINTS = (
    "Infrastructure Rebuilding",
    "Emergency Medical Aid",
    "Humanitarian Aid",
    "International Cooperation",
    "Disaster Relief Coordination",
    "Aid Effectiveness",
    "Recovery Progress",
    "Crisis Communications",
)

UN_ANNOUNCEMENTS = (
    "Missing Persons",
    "Humanitarian Aid Distribution",
    "Emergency Response Coordination",
    "Damage Reports",
    "Relief Measures",
    "Special Appeals",
    "Safety Tips",
    "Public Health Advisor",
    "International Cooperation",
    "Impact Reports",
    "Infrastructure Reports",
)

IGO_ENTITIES = (
    "United Nations Development Programme (UNDP)",
    "United Nations Children's Fund (UNICEF)",
    "World Health Organization (WHO)",
    "United Nations High Commissioner for Refugees (UNHCR)",
    "World Food Programme (WFP)",
    "International Labour Organization (ILO)",
    "United Nations Educational, Scientific and Cultural Organization (UNESCO)",
    "United Nations Population Fund (UNFPA)",
    "United Nations Office on Drugs and Crime (UNODC)",
    "International Criminal Court (ICC)",
    "International Maritime Organization (IMO)",
    "International Telecommunication Union (ITU)",
    "United Nations Environment Programme (UNEP)",
    "United Nations Office for the Coordination of Humanitarian Affairs (OCHA)",
    "United Nations Institute for Training and Research (UNITAR)",
    "United Nations Conference on Trade and Development (UNCTAD)",
    "United Nations Human Settlements Programme (UN-Habitat)",
    "World Intellectual Property Organization (WIPO)",
    "United Nations Framework Convention on Climate Change (UNFCCC)",
)

CUSTOMER_JOURNEY_STAGES = (
    "Awareness", "Advocacy", "Consideration", "Application", "Onboarding", "Usage", "Support",
    "Retention", "Booking", "Pre-flight", "In-flight", "Engagement", "Post-flight", "Acquisition",
    "Loyalty", "Purchase", "Activation", "Processing", "Service Delivery", "Feedback", "Renewal",
    "Subscription", "Billing", "Post-Purchase Support", "Churn", "Other",
)

PRODUCT_REFERENCES = (
    "Retail Banking Services",
    "Lending Solutions",
    "Card Services",
    "Investment Products",
    "Insurance Offerings",
    "Digital Banking Platforms",
    "Wealth Management",
    "Payment Services",
    "Other",
)

# Display category -> predicted_category values
INDUSTRY_CATEGORIES = (
    ("Business & Retail", ("Business", "Retail")),
    ("Finance", ("Finance",)),
    ("Technology", ("Technology",)),
    ("Healthcare", ("Healthcare",)),
    ("Energy & Automotive", ("Energy/Utilities", "Transportation", "Utilities", "Energy & Utilities", "Automotive")),
    ("Fashion", ("Fashion",)),
    ("Food & Beverage", ("Food & Beverage", "Bevarage", "Food", "Bevarages", "Foods")),
    ("Travel & Tourism", ("Travel & Tourism", "Travel/Tourism", "Travel", "Tourism")),
    ("Entertainment & News", ("Entertainment", "News", "Entertainment & News")),
    ("Other", ("Other",)),
)

EXTENDED_MENTION_TYPES = (
    "Marketing Content", "Clarification", "Praise", "Product Feedback", "Energy Sector News",
    "Customer Inquiry", "Complaint", "Service Feedback", "Suggestions", "Other",
)

TOUCHPOINT_REFERENCE_TYPES = (
    ("MarketingContent", "Marketing Content"),
    ("CustomerComplaint", "Customer Complaint"),
    ("Inquiry", "Inquiry"),
    ("Clarification", "Clarification"),
    ("Praise", "Praise"),
    ("Suggestion", "Suggestion"),
    ("ProductFeedback", "Product Feedback"),
    ("Other", "Other"),
)

URGENCY_LEVELS = ("High", "Medium", "Low")

URGENCY_MENTION_TYPES = MENTION_TYPES + (
    "Energy Sector News", "Customer Inquiry", "Complaint", "Clarification", "Service Feedback",
    "Suggestions",
)

RECURRENCE_GROUPS = (
    ("First Time", "First Mention"),
    ("Repeated Mention", "Recurring Issue"),
    ("Recurring Issue", "Ongoing Issue", "Ongoing Problem"),
)

LANGUAGE_TONES = ("Formal", "Informal", "Sarcastic", "Technical", "Professional", "Neutral", "Critical", "Other")

AUDIENCE_GROUPS = (
    ("ExistingCustomer", ("Existing Customer",)),
    ("PotentialCustomer", ("Potential Customer",)),
    ("Influencer", ("Influencer",)),
    ("Partner", ("Partner",)),
    ("GeneralPublic", ("General Public", "Public")),
)

ACTIONS_REQUIRED = (
    "No Action Needed", "None", "Immediate Response Needed", "Follow-Up Required", "No Action Required",
    "Escalation Required", "Follow-Up Needed", "No Action Required.", "Other",
)

EMOTIONS = ("anger", "fear", "happy", "sadness", "surprise")

INFLUENCER_TIERS = (
    ("celebrity", {"gte": 5000000}),
    ("mega", {"gte": 1000000, "lte": 5000000}),
    ("macro", {"gte": 500000, "lte": 1000000}),
    ("midtier", {"gte": 50000, "lte": 500000}),
    ("micro", {"gte": 10000, "lte": 50000}),
    ("nano", {"gte": 1000, "lte": 10000}),
)
NORMAL_USER_FOLLOWERS = {"gte": 0, "lte": 1000}
INFLUENCER_FOLLOWERS = {"gte": 1000}

SATISFACTION_BANDS = (
    ("twentyFiveScore", 0.0, 0.25),
    ("fiftyPercentScore", 0.25, 0.5),
    ("seventyPercentScore", 0.5, 0.75),
    ("hundredPercentScore", 0.75, 0.99),
)
CHURN_QUARTER_BANDS = (
    ("twentyFiveScore", 0.000001, 25),
    ("fiftyPercentScore", 25, 50),
    ("seventyPercentScore", 50, 75),
    ("hundredPercentScore", 75, 100),
)
CHURN_LEVEL_BANDS = (
    ("highScore", 70, 100),
    ("mediumScore", 40, 70),
    ("lowScore", 0.000001, 40),
)
SATISFACTION_SUMMARY_BANDS = (
    ("High(70-100%)", 0.7, 0.99),
    ("Medium(40-70%)", 0.4, 0.7),
    ("Low(0-40%)", 0.000001, 0.4),
)
CHURN_SUMMARY_BANDS = (
    ("High(70-100%)", 70, 100),
    ("Low(0-40%)", 0.000001, 40),
    ("Medium(40-70%)", 40, 70),
)

# aidType -> (field, first value, second value)
AID_CHARTS = {
    "Aid Requested/Aid Recieved": ("aid_requests_received", "request for aid", "receipt of aid"),
    "Aid Type": ("aid_type", "Local Aid", "International Aid"),
    "Mental Health and Trauma": ("aid_type", "Local Aid", "International Aid"),
    "Political or Social Criticism": ("aid_type", "Local Aid", "International Aid"),
    "Environmental Hazards": ("aid_type", "Local Aid", "International Aid"),
}

# Touchpoints considered by the complaint word cloud
COMPLAINT_CLOUD_TOUCHPOINTS = (
    "Mobile Banking App", "Mobile App", "Website", "ATM", "Physical Branch", "Social Media",
    "Online Banking Platform", "Customer Service (Phone, Email, or Live Chat)", "IVR System",
    "Call Center", "Bill Payment Platform", "Loan Application Process", "Service Connection/Disconnection",
    "Physical Office", "Installation/Technical Support", "Network Coverage", "Billing System",
    "Data Roaming", "Plan Upgrades", "Device Purchases/Repairs", "Wi-Fi Services", "Home Internet Services",
    "Meter Reading", "Outage Reporting System", "Mortgage Services", "Credit Card Services",
    "Fraud Detection/Resolution", "Wealth Management", "Transaction Alerts", "Airport Check-in Counter",
    "Self-service Kiosk", "In-flight Experience", "Boarding Process", "Baggage Handling", "Loyalty Program",
    "Government Website/Portal", "Public Service Office", "Document Submission Process",
    "Permit/License Application", "In-person Appointment", "Physical Store", "Digital Channels",
    "Physical Channels", "Customer Support", "Social and Engagement Channels", "Messaging and Alerts",
    "Loyalty and Rewards", "Other",
)

# Source icon classification used by document cards
SOURCE_ICONS = {
    "khaleej_times": "Blog",
    "Omanobserver": "Blog",
    "Time of oman": "Blog",
    "Blogs": "Blog",
    "Reddit": "Reddit",
    "FakeNews": "News",
    "News": "News",
    "Tumblr": "Tumblr",
    "Vimeo": "Vimeo",
    "Web": "Web",
    "DeepWeb": "Web",
}

# Rating bands on p_likes for review sources of review customers
REVIEW_RATING_BANDS = (
    ("positive", {"gt": 3}),
    ("negative", {"lt": 2}),
    ("neutral", {"gte": 2, "lte": 3}),
)

TOTAL_MENTIONS_SOCIAL_SOURCES = (
    "Twitter", "Instagram", "Facebook", "Youtube", "LinkedIn", "Pinterest", "Reddit", "Vimeo", "News",
)
