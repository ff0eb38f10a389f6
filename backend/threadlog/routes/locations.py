# Overview: Flask API routes for PSGC address lookups used by shipping forms.

from flask import Blueprint, jsonify

from ..clients import get_location_client
from ..decorators import service_errors

locations_bp = Blueprint("locations", __name__, url_prefix="/api/locations")


@locations_bp.get("/metro-manila/cities")
@service_errors("Failed to load cities")
def metro_manila_cities_route():
    return jsonify(get_location_client().list_metro_manila_cities())


@locations_bp.get("/provinces")
@service_errors("Failed to load provinces")
def provinces_route():
    return jsonify(get_location_client().list_provinces())


@locations_bp.get("/provinces/<province_code>/cities")
@service_errors("Failed to load cities")
def province_cities_route(province_code: str):
    return jsonify(get_location_client().list_cities_by_province(province_code))


@locations_bp.get("/cities/<city_code>/barangays")
@service_errors("Failed to load barangays")
def barangays_route(city_code: str):
    return jsonify(get_location_client().list_barangays_by_city(city_code))
