"""
Fixed catalog of Canadian reference stations.

Used as the default marker set and as the binning key when the live grid is
aggregated geographically. Order matters: nearest-station ties go to the
earlier entry.
"""
from typing import Tuple
from firesync.schemas.station import Station

CANADIAN_STATIONS: Tuple[Station, ...] = (
	Station(name="Vancouver", lat=49.2827, lon=-123.1207, province="BC"),
	Station(name="Kelowna", lat=49.8880, lon=-119.4960, province="BC"),
	Station(name="Kamloops", lat=50.6745, lon=-120.3273, province="BC"),
	Station(name="Calgary", lat=51.0447, lon=-114.0719, province="AB"),
	Station(name="Edmonton", lat=53.5461, lon=-113.4938, province="AB"),
	Station(name="Fort McMurray", lat=56.7266, lon=-111.3790, province="AB"),
	Station(name="Saskatoon", lat=52.1579, lon=-106.6702, province="SK"),
	Station(name="Regina", lat=50.4452, lon=-104.6189, province="SK"),
	Station(name="Winnipeg", lat=49.8951, lon=-97.1384, province="MB"),
	Station(name="Thunder Bay", lat=48.3809, lon=-89.2477, province="ON"),
	Station(name="Ottawa", lat=45.4215, lon=-75.6972, province="ON"),
	Station(name="Toronto", lat=43.6510, lon=-79.3470, province="ON"),
	Station(name="Sudbury", lat=46.4917, lon=-80.9930, province="ON"),
	Station(name="Montreal", lat=45.5019, lon=-73.5674, province="QC"),
	Station(name="Quebec City", lat=46.8139, lon=-71.2080, province="QC"),
	Station(name="Halifax", lat=44.6488, lon=-63.5752, province="NS"),
	Station(name="Whitehorse", lat=60.7212, lon=-135.0568, province="YT"),
	Station(name="Yellowknife", lat=62.4540, lon=-114.3718, province="NT"),
	Station(name="Prince George", lat=53.9171, lon=-122.7497, province="BC"),
	Station(name="Victoria", lat=48.4284, lon=-123.3656, province="BC"),
	Station(name="Smithers", lat=54.7800, lon=-127.1743, province="BC"),
	Station(name="Dease Lake", lat=58.4356, lon=-130.0089, province="BC"),
	Station(name="Fort St. John", lat=56.2524, lon=-120.8466, province="BC"),
	Station(name="High Level", lat=58.5169, lon=-117.1360, province="AB"),
	Station(name="Peace River", lat=56.2333, lon=-117.2833, province="AB"),
	Station(name="La Ronge", lat=55.1000, lon=-105.3000, province="SK"),
	Station(name="Flin Flon", lat=54.7682, lon=-101.8779, province="MB"),
	Station(name="Churchill", lat=58.7684, lon=-94.1650, province="MB"),
	Station(name="Moosonee", lat=51.2794, lon=-80.6463, province="ON"),
	Station(name="Timmins", lat=48.4758, lon=-81.3305, province="ON"),
	Station(name="Val-d'Or", lat=48.1086, lon=-77.7972, province="QC"),
	Station(name="Chibougamau", lat=49.9167, lon=-74.3667, province="QC"),
	Station(name="Schefferville", lat=54.8000, lon=-66.8167, province="QC"),
	Station(name="Goose Bay", lat=53.3019, lon=-60.3267, province="NL"),
	Station(name="St. John's", lat=47.5615, lon=-52.7126, province="NL"),
	Station(name="Iqaluit", lat=63.7467, lon=-68.5170, province="NU"),
	Station(name="Rankin Inlet", lat=62.8090, lon=-92.0853, province="NU"),
	Station(name="Cambridge Bay", lat=69.1167, lon=-105.0667, province="NU"),
)
