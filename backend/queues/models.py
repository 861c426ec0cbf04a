from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from core.models import BaseModel


class Poliklinik(BaseModel):
    name = models.CharField(max_length=100, unique=True)
    # Ticket prefix shown on displays, e.g. "A" -> A-001
    queue_code = models.CharField(max_length=5, unique=True)
    is_active = models.BooleanField(default=True)

    def __str__(self):
        return f"{self.name} ({self.queue_code})"


class Doctor(BaseModel):
    name = models.CharField(max_length=255)
    poliklinik = models.ForeignKey(Poliklinik, on_delete=models.PROTECT, related_name='doctors')
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='doctor_profile'
    )
    specialist = models.CharField(max_length=100, blank=True)

    def __str__(self):
        return self.name


class DoctorSchedule(BaseModel):
    DAY_CHOICES = (
        (1, 'Senin'),
        (2, 'Selasa'),
        (3, 'Rabu'),
        (4, 'Kamis'),
        (5, 'Jumat'),
        (6, 'Sabtu'),
        (7, 'Minggu'),
    )

    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='schedules')
    day = models.PositiveSmallIntegerField(choices=DAY_CHOICES, validators=[MinValueValidator(1), MaxValueValidator(7)])
    time_range = models.CharField(max_length=50, blank=True)  # e.g. "08.00 - 14.00"

    def __str__(self):
        return f"{self.doctor.name} - {self.get_day_display()} {self.time_range}"


class DoctorLeave(BaseModel):
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='leaves')
    date = models.DateField()
    reason = models.CharField(max_length=255, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['doctor', 'date'], name='unique_doctor_leave_date')
        ]

    def __str__(self):
        return f"{self.doctor.name} on leave {self.date}"


class Counter(BaseModel):
    name = models.CharField(max_length=50, unique=True)

    def __str__(self):
        return self.name


class DailyQuota(BaseModel):
    STATUS_CHOICES = (
        ('OPEN', 'Open'),
        ('CLOSED', 'Closed'),
    )

    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='daily_quotas')
    date = models.DateField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='OPEN')
    max_quota = models.PositiveIntegerField(default=30)
    current_count = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['doctor', 'date'], name='unique_quota_doctor_date'),
            models.CheckConstraint(
                condition=models.Q(current_count__lte=models.F('max_quota')),
                name='quota_count_within_capacity'
            ),
        ]

    def __str__(self):
        return f"{self.doctor.name} {self.date} ({self.current_count}/{self.max_quota})"

    @property
    def remaining(self):
        return max(self.max_quota - self.current_count, 0)


class Ticket(BaseModel):
    STATUS_CHOICES = (
        ('WAITING', 'Waiting'),
        ('CALLED', 'Called'),
        ('SERVED', 'Served'),
        ('SKIPPED', 'Skipped'),
    )

    daily_quota = models.ForeignKey(DailyQuota, on_delete=models.PROTECT, related_name='tickets')
    queue_number = models.PositiveIntegerField()
    queue_code = models.CharField(max_length=20)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='WAITING')

    counter_name = models.CharField(max_length=50, blank=True)
    call_count = models.PositiveIntegerField(default=0)
    called_at = models.DateTimeField(null=True, blank=True)
    finished_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['daily_quota', 'queue_number'], name='unique_ticket_number_per_quota')
        ]
        indexes = [
            models.Index(fields=['status', 'created_at'], name='ticket_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.queue_code} ({self.status})"

    @property
    def doctor(self):
        return self.daily_quota.doctor

    @property
    def poliklinik(self):
        return self.daily_quota.doctor.poliklinik
