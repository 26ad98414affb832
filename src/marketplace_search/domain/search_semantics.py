"""Search semantics for advertisement filtering and plan selection."""

# Rule names for reference in tests and plan explanations
RULE_VISIBILITY_DEFAULT = "visibility: isActive=true unless isActive given or isArchived=any; isHidden=true always excluded"
RULE_CATEGORY_CLOSURE = "category: categoryId in the requested ids, plus all descendants when includeSubcategories=true"
RULE_TAGS_ANY = "tags: advertisement.tags intersects requested tags (or, default)"
RULE_TAGS_ALL = "tags: advertisement.tags is a superset of requested tags (and)"
RULE_LOCATION_SUBSTRING = "location: case-insensitive substring"
RULE_SEARCH_ANY_FIELD = "search: case-insensitive substring on any of title, description, exchangePreferences, location, searchVector"
RULE_GEO_SPHERICAL_CAP = "geo: coordinates within maxDistance meters of (longitude, latitude); radius / 6378137 radians"
RULE_COUNT_SAME_PREDICATE = "count: total uses exactly the page predicate, geo included"
RULE_STABLE_SORT = "sort: requested key, then _id ascending"

# Rules that force the joined (profile) plan
RULE_JOIN_PORTFOLIO = "join: hasPortfolio given (true, false or any) requires the profile join"
RULE_JOIN_LANGUAGES = "join: languages given; profile language matches any, case-insensitive"
RULE_JOIN_AUTHOR_RATING = "join: author rating range; profile joined on ownerId = profile.user"
RULE_SIMPLE_DEFAULT = "simple: no profile-dependent filter requested"
