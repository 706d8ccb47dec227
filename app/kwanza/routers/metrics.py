from fastapi import APIRouter, Depends, Response

from app.kwanza.core.deps import get_metrics
from app.kwanza.core.metrics import Metrics

router = APIRouter()


@router.get("/api/ops/metrics")
def get_metrics_snapshot(metrics: Metrics = Depends(get_metrics)):
    snapshot = metrics.render()
    return Response(content=snapshot.content, media_type=snapshot.content_type)
