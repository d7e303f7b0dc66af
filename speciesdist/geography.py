"""
Boundary Names and Inline Territories

The map draws Italian regions from an external boundary dataset whose
polygons carry Italian region names. This module maps those names onto
region codes and holds the few territories that are not in that dataset.

Lookup Rules:
- Names are matched exactly against BOUNDARY_NAME_TO_CODE
- Unmapped names return None; the map draws them with the fallback colour
  and never turns a click on them into a filter

Inline Territories:
- Corsica: polygon in lon/lat (WGS84)
- San Marino and Vatican City: single points
Canton Ticino and Malta have no geometry at all; they are shown as insets.

Fetching and projecting the boundary dataset are left to the renderer.

Example Usage:
    >>> from speciesdist.geography import region_code_for_boundary
    >>> region_code_for_boundary("Valle d'Aosta/Vallée d'Aoste")
    'Ao'
    >>> region_code_for_boundary("Île-de-France") is None
    True
"""

from typing import Any, Dict, List, Optional

# Region names as used by the openpolis limits_IT_regions boundaries
BOUNDARY_NAME_TO_CODE: Dict[str, str] = {
    "Piemonte": "Pi",
    "Valle d'Aosta/Vallée d'Aoste": "Ao",
    "Lombardia": "Lo",
    "Trentino-Alto Adige/Südtirol": "VT",
    "Veneto": "V",
    "Friuli-Venezia Giulia": "FVG",
    "Liguria": "Li",
    "Emilia-Romagna": "ER",
    "Toscana": "To",
    "Umbria": "Um",
    "Marche": "Ma",
    "Lazio": "La",
    "Abruzzo": "Abr",
    "Molise": "Mo",
    "Campania": "Cp",
    "Puglia": "Pu",
    "Basilicata": "Bas",
    "Calabria": "Cal",
    "Sicilia": "Si",
    "Sardegna": "Sa",
}

BOUNDARY_NAME_PROPERTY = "reg_name"

# Territories drawn as insets rather than geometry
INSET_CODES: List[str] = ["CT", "M"]

_CORSICA_RING = [
    [9.405307844466567, 41.723804387582113], [9.383431711341574, 41.649761538227416],
    [9.286510319381238, 41.605669135935102], [9.367819171366634, 41.593281742238048],
    [9.275934633204354, 41.528975722108406], [9.287259514328193, 41.483790936903226],
    [9.225861820615306, 41.442532083010612], [9.218623285887398, 41.40752361028656],
    [9.26338498902215, 41.426433587808837], [9.219627332880458, 41.368037674989175],
    [9.095789540398993, 41.393867117443186], [9.118568480384525, 41.437814846493815],
    [9.072341265695263, 41.444125518183291], [9.079939036705287, 41.477490181399375],
    [9.039971911736471, 41.457190102938142], [8.844924217525206, 41.51772689145654],
    [8.851779351289851, 41.541646414140864], [8.787374277668789, 41.56027323135234],
    [8.792686105775315, 41.629141834656039], [8.86950248302483, 41.646094582834898],
    [8.912302175747534, 41.690968137726145], [8.786208623756115, 41.703393973596334],
    [8.777758351541459, 41.740349008780676], [8.660998475015099, 41.739102850343613],
    [8.73156491350688, 41.780500419583774], [8.717186119743149, 41.803463280794496],
    [8.771293445936237, 41.811239495998748], [8.755378173710548, 41.845155191025043],
    [8.802583204586574, 41.892612057686215], [8.747681408356211, 41.932980107818587],
    [8.609260724878462, 41.895592133470622], [8.622969465271767, 41.934391301203441],
    [8.593911031955656, 41.963567008645192], [8.648732518799617, 41.968935714851334],
    [8.65829050359112, 42.010587952778955], [8.7439305827189, 42.059452401986157],
    [8.701201048419884, 42.111186228334965], [8.578625388912606, 42.127931181938649],
    [8.573349223922857, 42.227574406193604], [8.538297859851799, 42.236725432978382],
    [8.69096771019778, 42.266208330559657], [8.602204278658647, 42.311935266220878],
    [8.615678019773627, 42.347463870963843], [8.556929278170552, 42.335117714417549],
    [8.544337233506933, 42.367923444272137], [8.65655172452718, 42.417638535266455],
    [8.679451667581482, 42.467282303366446], [8.647890078726169, 42.474972327613003],
    [8.664657852156488, 42.514393967763979], [8.720073754223952, 42.524673476105718],
    [8.710433663415481, 42.576908638511327], [8.784057248482178, 42.55707652765291],
    [8.805764857659868, 42.601914777492127], [9.01758203210049, 42.64256200706059],
    [9.123389648682867, 42.730295248775128], [9.221748075603211, 42.73419346374569],
    [9.286949865049758, 42.675863719225561], [9.321130761610506, 42.696025446225818],
    [9.342508689078926, 42.794218024201967], [9.310033423748134, 42.832482861864591],
    [9.340296138534139, 42.865670455535792], [9.321680171238272, 42.895810665795217],
    [9.359475439344676, 42.92288688257868], [9.343577145277855, 42.997738894730141],
    [9.421454163383331, 43.010730689772586], [9.460566721022367, 42.985852098853456],
    [9.484088028758697, 42.853813332049896], [9.449197193628908, 42.662244978511467],
    [9.533934376064618, 42.543526166677424], [9.5587452153913, 42.19575714984753],
    [9.549283709661312, 42.103864618200554], [9.413558241530506, 41.955191770673444],
    [9.405307844466567, 41.723804387582113],
]

STATIC_FEATURES: List[Dict[str, Any]] = [
    {
        "type": "Feature",
        "properties": {BOUNDARY_NAME_PROPERTY: "Corsica", "code": "Cor"},
        "geometry": {"type": "Polygon", "coordinates": [_CORSICA_RING]},
    },
    {
        "type": "Feature",
        "properties": {BOUNDARY_NAME_PROPERTY: "San Marino", "code": "RSM"},
        "geometry": {"type": "Point", "coordinates": [12.45, 43.93]},
    },
    {
        "type": "Feature",
        "properties": {BOUNDARY_NAME_PROPERTY: "Vatican City", "code": "CV"},
        "geometry": {"type": "Point", "coordinates": [12.45, 41.90]},
    },
]


def region_code_for_boundary(name: Optional[str]) -> Optional[str]:
    """Region code for a boundary polygon name, or None if unmapped."""
    if name is None:
        return None
    return BOUNDARY_NAME_TO_CODE.get(name)


def feature_region_code(feature: Dict[str, Any]) -> Optional[str]:
    """
    Region code for a GeoJSON-style feature.

    Inline features carry their code directly; boundary features are
    resolved through their name property.
    """
    properties = feature.get("properties") or {}
    if properties.get("code"):
        return properties["code"]
    return region_code_for_boundary(properties.get(BOUNDARY_NAME_PROPERTY))
