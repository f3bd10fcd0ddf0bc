"""
Static airport reference table: (code, name, city, country, region).

Region is a coarse grouping used for browsing, not a geographic authority.
"""

AIRPORTS = (
    ("JFK", "John F. Kennedy International Airport", "New York", "United States", "North America"),
    ("LAX", "Los Angeles International Airport", "Los Angeles", "United States", "North America"),
    ("ORD", "O'Hare International Airport", "Chicago", "United States", "North America"),
    ("DFW", "Dallas/Fort Worth International Airport", "Dallas", "United States", "North America"),
    ("DEN", "Denver International Airport", "Denver", "United States", "North America"),
    ("LAS", "Harry Reid International Airport", "Las Vegas", "United States", "North America"),
    ("PHX", "Phoenix Sky Harbor International Airport", "Phoenix", "United States", "North America"),
    ("IAH", "George Bush Intercontinental Airport", "Houston", "United States", "North America"),
    ("MIA", "Miami International Airport", "Miami", "United States", "North America"),
    ("SEA", "Seattle-Tacoma International Airport", "Seattle", "United States", "North America"),
    ("SFO", "San Francisco International Airport", "San Francisco", "United States", "North America"),
    ("LGA", "LaGuardia Airport", "New York", "United States", "North America"),
    ("EWR", "Newark Liberty International Airport", "Newark", "United States", "North America"),
    ("BOS", "Logan International Airport", "Boston", "United States", "North America"),
    ("BWI", "Baltimore/Washington International Airport", "Baltimore", "United States", "North America"),
    ("DCA", "Ronald Reagan Washington National Airport", "Washington D.C.", "United States", "North America"),
    ("IAD", "Washington Dulles International Airport", "Washington D.C.", "United States", "North America"),
    ("ATL", "Hartsfield-Jackson Atlanta International Airport", "Atlanta", "United States", "North America"),
    ("CLT", "Charlotte Douglas International Airport", "Charlotte", "United States", "North America"),
    ("MCO", "Orlando International Airport", "Orlando", "United States", "North America"),
    ("YYZ", "Toronto Pearson International Airport", "Toronto", "Canada", "North America"),
    ("YVR", "Vancouver International Airport", "Vancouver", "Canada", "North America"),
    ("YUL", "Montréal-Pierre Elliott Trudeau International Airport", "Montreal", "Canada", "North America"),
    ("MEX", "Mexico City International Airport", "Mexico City", "Mexico", "North America"),
    ("LHR", "Heathrow Airport", "London", "United Kingdom", "Europe"),
    ("CDG", "Charles de Gaulle Airport", "Paris", "France", "Europe"),
    ("FRA", "Frankfurt Airport", "Frankfurt", "Germany", "Europe"),
    ("AMS", "Amsterdam Airport Schiphol", "Amsterdam", "Netherlands", "Europe"),
    ("MAD", "Adolfo Suárez Madrid-Barajas Airport", "Madrid", "Spain", "Europe"),
    ("BCN", "Barcelona-El Prat Airport", "Barcelona", "Spain", "Europe"),
    ("FCO", "Leonardo da Vinci-Fiumicino Airport", "Rome", "Italy", "Europe"),
    ("MXP", "Milan Malpensa Airport", "Milan", "Italy", "Europe"),
    ("MUC", "Munich Airport", "Munich", "Germany", "Europe"),
    ("ZUR", "Zurich Airport", "Zurich", "Switzerland", "Europe"),
    ("VIE", "Vienna International Airport", "Vienna", "Austria", "Europe"),
    ("CPH", "Copenhagen Airport", "Copenhagen", "Denmark", "Europe"),
    ("ARN", "Stockholm Arlanda Airport", "Stockholm", "Sweden", "Europe"),
    ("OSL", "Oslo Airport", "Oslo", "Norway", "Europe"),
    ("HEL", "Helsinki-Vantaa Airport", "Helsinki", "Finland", "Europe"),
    ("IST", "Istanbul Airport", "Istanbul", "Turkey", "Europe"),
    ("ATH", "Athens International Airport", "Athens", "Greece", "Europe"),
    ("LGW", "Gatwick Airport", "London", "United Kingdom", "Europe"),
    ("STN", "Stansted Airport", "London", "United Kingdom", "Europe"),
    ("MAN", "Manchester Airport", "Manchester", "United Kingdom", "Europe"),
    ("EDI", "Edinburgh Airport", "Edinburgh", "United Kingdom", "Europe"),
    ("DUB", "Dublin Airport", "Dublin", "Ireland", "Europe"),
    ("BRU", "Brussels Airport", "Brussels", "Belgium", "Europe"),
    ("LIS", "Lisbon Airport", "Lisbon", "Portugal", "Europe"),
    ("OPO", "Francisco Sá Carneiro Airport", "Porto", "Portugal", "Europe"),
    ("PRG", "Václav Havel Airport Prague", "Prague", "Czech Republic", "Europe"),
    ("WAW", "Warsaw Chopin Airport", "Warsaw", "Poland", "Europe"),
    ("BUD", "Budapest Ferenc Liszt International Airport", "Budapest", "Hungary", "Europe"),
    ("NRT", "Narita International Airport", "Tokyo", "Japan", "Asia"),
    ("HND", "Haneda Airport", "Tokyo", "Japan", "Asia"),
    ("KIX", "Kansai International Airport", "Osaka", "Japan", "Asia"),
    ("ICN", "Incheon International Airport", "Seoul", "South Korea", "Asia"),
    ("PEK", "Beijing Capital International Airport", "Beijing", "China", "Asia"),
    ("PKX", "Beijing Daxing International Airport", "Beijing", "China", "Asia"),
    ("PVG", "Shanghai Pudong International Airport", "Shanghai", "China", "Asia"),
    ("SHA", "Shanghai Hongqiao International Airport", "Shanghai", "China", "Asia"),
    ("CAN", "Guangzhou Baiyun International Airport", "Guangzhou", "China", "Asia"),
    ("SZX", "Shenzhen Bao'an International Airport", "Shenzhen", "China", "Asia"),
    ("HKG", "Hong Kong International Airport", "Hong Kong", "Hong Kong", "Asia"),
    ("TPE", "Taiwan Taoyuan International Airport", "Taipei", "Taiwan", "Asia"),
    ("SIN", "Singapore Changi Airport", "Singapore", "Singapore", "Asia"),
    ("KUL", "Kuala Lumpur International Airport", "Kuala Lumpur", "Malaysia", "Asia"),
    ("BKK", "Suvarnabhumi Airport", "Bangkok", "Thailand", "Asia"),
    ("DMK", "Don Mueang International Airport", "Bangkok", "Thailand", "Asia"),
    ("CGK", "Soekarno-Hatta International Airport", "Jakarta", "Indonesia", "Asia"),
    ("MNL", "Ninoy Aquino International Airport", "Manila", "Philippines", "Asia"),
    ("DEL", "Indira Gandhi International Airport", "New Delhi", "India", "Asia"),
    ("BOM", "Chhatrapati Shivaji Maharaj International Airport", "Mumbai", "India", "Asia"),
    ("BLR", "Kempegowda International Airport", "Bangalore", "India", "Asia"),
    ("MAA", "Chennai International Airport", "Chennai", "India", "Asia"),
    ("HYD", "Rajiv Gandhi International Airport", "Hyderabad", "India", "Asia"),
    ("CCU", "Netaji Subhas Chandra Bose International Airport", "Kolkata", "India", "Asia"),
    ("DXB", "Dubai International Airport", "Dubai", "United Arab Emirates", "Middle East"),
    ("DWC", "Al Maktoum International Airport", "Dubai", "United Arab Emirates", "Middle East"),
    ("AUH", "Abu Dhabi International Airport", "Abu Dhabi", "United Arab Emirates", "Middle East"),
    ("DOH", "Hamad International Airport", "Doha", "Qatar", "Middle East"),
    ("KWI", "Kuwait International Airport", "Kuwait City", "Kuwait", "Middle East"),
    ("BAH", "Bahrain International Airport", "Manama", "Bahrain", "Middle East"),
    ("RUH", "King Khalid International Airport", "Riyadh", "Saudi Arabia", "Middle East"),
    ("JED", "King Abdulaziz International Airport", "Jeddah", "Saudi Arabia", "Middle East"),
    ("TLV", "Ben Gurion Airport", "Tel Aviv", "Israel", "Middle East"),
    ("CAI", "Cairo International Airport", "Cairo", "Egypt", "Africa"),
    ("CPT", "Cape Town International Airport", "Cape Town", "South Africa", "Africa"),
    ("JNB", "O.R. Tambo International Airport", "Johannesburg", "South Africa", "Africa"),
    ("CMN", "Mohammed V International Airport", "Casablanca", "Morocco", "Africa"),
    ("LOS", "Murtala Muhammed International Airport", "Lagos", "Nigeria", "Africa"),
    ("ADD", "Addis Ababa Bole International Airport", "Addis Ababa", "Ethiopia", "Africa"),
    ("SYD", "Sydney Kingsford Smith Airport", "Sydney", "Australia", "Oceania"),
    ("MEL", "Melbourne Airport", "Melbourne", "Australia", "Oceania"),
    ("BNE", "Brisbane Airport", "Brisbane", "Australia", "Oceania"),
    ("PER", "Perth Airport", "Perth", "Australia", "Oceania"),
    ("ADL", "Adelaide Airport", "Adelaide", "Australia", "Oceania"),
    ("AKL", "Auckland Airport", "Auckland", "New Zealand", "Oceania"),
    ("CHC", "Christchurch Airport", "Christchurch", "New Zealand", "Oceania"),
    ("GRU", "São Paulo/Guarulhos International Airport", "São Paulo", "Brazil", "South America"),
    ("GIG", "Rio de Janeiro–Galeão International Airport", "Rio de Janeiro", "Brazil", "South America"),
    ("BSB", "Brasília International Airport", "Brasília", "Brazil", "South America"),
    ("EZE", "Ezeiza International Airport", "Buenos Aires", "Argentina", "South America"),
    ("SCL", "Santiago International Airport", "Santiago", "Chile", "South America"),
    ("LIM", "Jorge Chávez International Airport", "Lima", "Peru", "South America"),
    ("BOG", "El Dorado International Airport", "Bogotá", "Colombia", "South America"),
    ("UIO", "Mariscal Sucre International Airport", "Quito", "Ecuador", "South America"),
    ("CCS", "Simón Bolívar International Airport", "Caracas", "Venezuela", "South America"),
)
