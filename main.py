import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware  # Import CORS middleware

from routes.keyword_report import router as keyword_report_router
from routes.undp_report import router as undp_report_router
from routes.undp_posts import router as undp_posts_router

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Social Listening Reports API",
    description="Topic reports computed from labelled social mentions in Elasticsearch",
    version="2.0.0"
)


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allows all origins
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods
    allow_headers=["*"],  # Allows all headers
)

########### REPORTS ##########
app.include_router(keyword_report_router)
app.include_router(undp_report_router)
app.include_router(undp_posts_router)


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=False)
