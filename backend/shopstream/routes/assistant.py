# /shopstream/routes/assistant.py

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from shopstream.models.api import (
    AnswerRequest,
    AnswerResponse,
    OutfitRecommendationRequest,
    OutfitRecommendationResponse,
)
from shopstream.services.ai_service import AIService, OutfitRecommendationError, recommendations_or_default
from shopstream.services.answer_service import AnswerService, describe_pick
from shopstream.services.inventory_service import InventoryStore
from shopstream.utils.dependencies import get_ai_service, get_answer_service, get_inventory_store

# The AI host and stylist endpoints.

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Assistant"])


@router.post("/answer", response_model=AnswerResponse)
async def answer(body: AnswerRequest):
    """Server-side host answer, usable as the shell's external answer service."""
    return AnswerResponse(answer=describe_pick(body.prompt, body.products, body.lang))


@router.post("/ask-host", response_model=AnswerResponse)
async def ask_host(body: AnswerRequest, answer_service: AnswerService = Depends(get_answer_service)):
    return AnswerResponse(answer=await answer_service.ask_host(body.prompt, body.products, body.lang))


@router.post("/outfit-recommendations", response_model=OutfitRecommendationResponse)
async def outfit_recommendations(
    body: OutfitRecommendationRequest,
    ai_service: AIService = Depends(get_ai_service),
    inventory_store: InventoryStore = Depends(get_inventory_store),
):
    if not ai_service.is_configured:
        return JSONResponse({"error": "OpenAI API key not configured"}, status_code=400)
    if not body.query.strip():
        return JSONResponse({"error": "Missing query or products data"}, status_code=400)

    products = body.products if body.products is not None else inventory_store.all_products()
    if not products:
        return JSONResponse(
            {"error": "Inventory not loaded. Refresh the inventory before requesting outfits."},
            status_code=409,
        )

    try:
        result = await ai_service.recommend_outfits(body.query, products, body.budget)
    except OutfitRecommendationError as e:
        logger.error(f"Outfit Recommendations API Error: {e}")
        return JSONResponse(
            {"error": "Failed to generate outfit recommendations", "details": str(e)},
            status_code=500,
        )

    return OutfitRecommendationResponse(
        query=body.query,
        recommendations=recommendations_or_default(result),
        total_products=len(products),
    )
