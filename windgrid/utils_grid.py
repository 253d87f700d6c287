def clamp(x, a, b):
    return a if x < a else b if x > b else x

def bbox_contains(bounds, lon: float, lat: float) -> bool:
    """
    bounds = (minlon, minlat, maxlon, maxlat), inclusive on every edge.
    """
    minlon, minlat, maxlon, maxlat = bounds
    return minlon <= lon <= maxlon and minlat <= lat <= maxlat
