from apps.core.permissions import IsRadioUser


class HasStationAccess(IsRadioUser):
    """
    Radio user whose station is active and has content access.

    Every radio content endpoint sits behind this gate; views read the
    station from ``request.user.radio_station``.
    """
    message = "Station does not have content access."

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        station = request.user.radio_station
        return station is not None and station.can_access_content
