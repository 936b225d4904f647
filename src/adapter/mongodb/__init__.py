USERS_COLLECTION_NAME = 'users'
ACTIVITIES_COLLECTION_NAME = 'activities'
