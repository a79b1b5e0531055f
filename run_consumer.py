#!/usr/bin/env python
"""
Script to run RabbitMQ consumer for Invoice Service
"""
from invoice_service.consumers.order_consumer import start_consumer

if __name__ == "__main__":
    start_consumer()
