def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def order_payload(items, payment_method="cod", payment_details=None, totals=None, shipping_address=None):
    return {
        "items": [
            {"productId": str(pid), "name": name, "quantity": qty, "price": price}
            for pid, name, qty, price in items
        ],
        "shippingAddress": shipping_address or {
            "name": "Ayesha Khan",
            "email": "ayesha@example.com",
            "phone": "03001234567",
            "address": "12 Mall Road",
            "city": "Lahore",
            "country": "Pakistan",
            "zip": "54000",
        },
        "paymentMethod": payment_method,
        "paymentDetails": payment_details or {},
        "totals": totals or {"subtotal": 20, "shipping": 5, "tax": 1, "grandTotal": 26},
    }
