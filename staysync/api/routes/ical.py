from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..dependencies import get_unit_service
from ..services.unit_service import UnitService

router = APIRouter(tags=["iCal"])


@router.get("/ical/{unit_id}.ics")
async def generate_ical_feed(
    unit_id: str,
    unit_service: UnitService = Depends(get_unit_service)
):
    """
    Generate iCal file for a given unit.
    """
    ical_content = await unit_service.generate_ical_feed(unit_id)
    return Response(
        content=ical_content,
        media_type="text/calendar; charset=utf-8",
        headers=unit_service.feed_headers(unit_id),
    )
