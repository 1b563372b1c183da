from datetime import datetime, timezone

from admin.app import create_app
from core.cache_service import comment_tree_cache

app = create_app()


@app.get("/health")
async def health_check():
    """Проверка работоспособности и число постов в кэше комментариев"""
    return {
        "status": "ok",
        "service": app.title,
        "version": app.version,
        "cached_posts": comment_tree_cache.size,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
